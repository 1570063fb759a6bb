from typing import Annotated, Any, Callable, Literal, Optional, get_args

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    WrapValidator,
)
from pydantic.alias_generators import to_camel

SUPER_ADMIN = "super_admin"
SUB_ADMIN = "sub_admin"
ROLES = (SUPER_ADMIN, SUB_ADMIN)

UserStatus = Literal["pending", "approved", "rejected"]
LandingPageStatus = Literal["active", "inactive"]
AccessStatus = Literal["active", "inactive", "revoked"]
RequestStatus = Literal["pending", "approved", "rejected"]
LeadStatus = Literal["new", "contacted", "qualified", "converted", "lost"]

REQUEST_STATUSES = get_args(RequestStatus)
LEAD_STATUSES = get_args(LeadStatus)

PASSWORD_MIN_LENGTH = 6


def min_length(length: int, message: str, *, strip: bool = True) -> AfterValidator:
    """Length check that reports ``message`` instead of pydantic's default text."""

    def check(value: str) -> str:
        text = value.strip() if strip else value
        if len(text) < length:
            raise ValueError(message)
        return text

    return AfterValidator(check)


def max_length(length: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        text = value.strip()
        if len(text) > length:
            raise ValueError(message)
        return text

    return AfterValidator(check)


def _email(value: Any, handler: Callable[[Any], str]) -> str:
    if isinstance(value, str):
        value = value.strip()
    try:
        return handler(value).lower()
    except ValidationError:
        raise ValueError("Please provide a valid email")


_http_url = TypeAdapter(AnyHttpUrl)


def _url(value: str) -> str:
    # validated as a URL but stored as typed, without pydantic's normalization
    text = value.strip()
    try:
        _http_url.validate_python(text)
    except ValidationError:
        raise ValueError("Please provide a valid URL")
    return text


Text = Annotated[str, StringConstraints(strip_whitespace=True)]
Email = Annotated[EmailStr, WrapValidator(_email)]
HttpUrlText = Annotated[str, AfterValidator(_url)]
PersonName = Annotated[str, min_length(2, "Name must be at least 2 characters")]
CompanyName = Annotated[str, min_length(2, "Company name must be at least 2 characters")]
Phone = Annotated[str, min_length(7, "Please provide a valid phone number")]
Password = Annotated[
    str,
    min_length(PASSWORD_MIN_LENGTH, "Password must be at least 6 characters", strip=False),
]


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class UserSummary(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None

    @classmethod
    def from_prefixed(cls, row: dict, prefix: str, id_key: str) -> Optional["UserSummary"]:
        """Build from joined columns such as ``granted_by_name``/``granted_by_email``."""
        user_id = row.get(id_key)
        if user_id is None:
            return None
        return cls(
            id=user_id,
            name=row.get(f"{prefix}_name"),
            email=row.get(f"{prefix}_email"),
            company_name=row.get(f"{prefix}_company_name"),
        )


class LandingPageSummary(CamelModel):
    id: int
    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_prefixed(cls, row: dict) -> Optional["LandingPageSummary"]:
        landing_page_id = row.get("landing_page_id")
        if landing_page_id is None:
            return None
        return cls(
            id=landing_page_id,
            name=row.get("landing_page_name"),
            url=row.get("landing_page_url"),
            description=row.get("landing_page_description"),
            status=row.get("landing_page_status"),
        )

