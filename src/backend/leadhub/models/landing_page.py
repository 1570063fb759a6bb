from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, get_args

from pydantic import Field

from leadhub.models.common import (
    CamelModel,
    HttpUrlText,
    LandingPageStatus,
    Text,
    UserSummary,
    min_length,
)

FieldType = Literal[
    "text", "email", "phone", "textarea", "select", "checkbox", "radio", "number", "date", "url"
]
FIELD_TYPES = get_args(FieldType)

DEFAULT_FIELD_NAMES = ("firstName", "lastName", "email", "phone", "company", "message")
DEFAULT_FIELD_TOGGLES = {
    "firstName": True,
    "lastName": True,
    "email": True,
    "phone": False,
    "company": False,
    "message": False,
}

PageName = Annotated[str, min_length(1, "Name is required")]


class FieldOption(CamelModel):
    value: str
    label: str


class FieldValidation(CamelModel):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None


class FormFieldDefinition(CamelModel):
    name: str
    label: str
    type: FieldType = "text"
    required: bool = False
    placeholder: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)
    validation: FieldValidation = Field(default_factory=FieldValidation)
    order: int = 0


class LandingPageCreate(CamelModel):
    name: PageName
    url: HttpUrlText
    description: Optional[Text] = None
    status: LandingPageStatus = "active"
    form_fields: Optional[List[Dict[str, Any]]] = None
    include_default_fields: Optional[Dict[str, Any]] = None


class LandingPageUpdate(CamelModel):
    name: Optional[PageName] = None
    url: Optional[HttpUrlText] = None
    description: Optional[Text] = None
    status: Optional[LandingPageStatus] = None
    form_fields: Optional[List[Dict[str, Any]]] = None
    include_default_fields: Optional[Dict[str, Any]] = None


class FormFieldsUpdate(CamelModel):
    form_fields: List[Dict[str, Any]]
    include_default_fields: Dict[str, Any]


class FormTestRequest(CamelModel):
    form_data: Optional[Dict[str, Any]] = None


class LandingPageOut(CamelModel):
    id: int
    name: str
    url: str
    description: Optional[str] = None
    status: str
    form_fields: List[FormFieldDefinition] = Field(default_factory=list)
    include_default_fields: Dict[str, bool] = Field(default_factory=dict)
    created_by: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "LandingPageOut":
        return cls(
            id=row["id"],
            name=row["name"],
            url=row["url"],
            description=row.get("description"),
            status=row["status"],
            form_fields=sorted_fields(row.get("form_fields")),
            include_default_fields=default_toggles(row.get("include_default_fields")),
            created_by=UserSummary.from_prefixed(row, "created_by", "created_by"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class FormConfigOut(CamelModel):
    name: str
    form_fields: List[FormFieldDefinition]
    include_default_fields: Dict[str, bool]


def default_toggles(stored: Optional[Dict[str, Any]]) -> Dict[str, bool]:
    """Stored toggles merged over the defaults, restricted to the known keys."""
    toggles = dict(DEFAULT_FIELD_TOGGLES)
    for key, value in (stored or {}).items():
        if key in toggles:
            toggles[key] = bool(value)
    return toggles


def sorted_fields(stored: Optional[List[Dict[str, Any]]]) -> List[FormFieldDefinition]:
    fields = [FormFieldDefinition.model_validate(item) for item in stored or []]
    return sorted(fields, key=lambda field: field.order)
