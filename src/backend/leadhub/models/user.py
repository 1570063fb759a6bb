from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import field_validator

from leadhub.models.common import (
    CamelModel,
    CompanyName,
    Email,
    Password,
    PersonName,
    Phone,
    UserStatus,
    UserSummary,
    min_length,
)

RejectionReason = Annotated[str, min_length(5, "Reason must be at least 5 characters")]


class RegisterRequest(CamelModel):
    name: PersonName
    email: Email
    password: Password
    company_name: CompanyName
    phone: Phone


class LoginRequest(CamelModel):
    email: Email
    password: Annotated[str, min_length(1, "Please provide a password", strip=False)]


class UpdateDetailsRequest(CamelModel):
    name: Optional[PersonName] = None
    company_name: Optional[CompanyName] = None
    phone: Optional[Phone] = None


class UpdatePasswordRequest(CamelModel):
    current_password: Annotated[str, min_length(1, "Please provide current password", strip=False)]
    new_password: Annotated[
        str, min_length(6, "New password must be at least 6 characters", strip=False)
    ]


class RejectUserRequest(CamelModel):
    reason: Optional[RejectionReason] = None


class CreateSubAdminRequest(CamelModel):
    name: PersonName
    email: Email
    password: Password
    company_name: CompanyName
    phone: Optional[Phone] = None
    status: UserStatus = "approved"
    landing_page_id: Optional[int] = None


class UpdateSubAdminRequest(CamelModel):
    name: Optional[PersonName] = None
    company_name: Optional[CompanyName] = None
    phone: Optional[Phone] = None
    status: Optional[UserStatus] = None
    # Explicit null or "" clears the assignment; absent leaves it untouched.
    landing_page_id: Optional[int] = None

    @field_validator("landing_page_id", mode="before")
    @classmethod
    def blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: str
    status: str
    company_name: Optional[str] = None
    phone: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "UserOut":
        # password_hash never leaves the storage layer
        return cls.model_validate({k: v for k, v in row.items() if k != "password_hash"})


def user_summary(row: dict) -> UserSummary:
    return UserSummary(
        id=row["id"],
        name=row.get("name"),
        email=row.get("email"),
        company_name=row.get("company_name"),
    )
