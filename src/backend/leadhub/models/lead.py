from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from leadhub.models.common import (
    CamelModel,
    Email,
    LandingPageSummary,
    LeadStatus,
    Text,
    min_length,
)

FIXED_LEAD_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "company": "company",
    "message": "message",
}

DynamicValue = Union[str, List[str]]
FirstName = Annotated[str, min_length(1, "First name cannot be empty")]
LastName = Annotated[str, min_length(1, "Last name cannot be empty")]


class LeadFilters(BaseModel):
    # None means unrestricted; an empty list matches nothing.
    landing_page_ids: Optional[List[int]] = None
    status: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class LeadStatusUpdate(CamelModel):
    status: LeadStatus


class LeadDetailsUpdate(CamelModel):
    first_name: Optional[FirstName] = None
    last_name: Optional[LastName] = None
    email: Optional[Email] = None
    phone: Optional[Text] = None
    company: Optional[Text] = None
    message: Optional[Text] = None


class LeadOut(CamelModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    dynamic_fields: Dict[str, Any] = Field(default_factory=dict)
    all_form_data: Dict[str, Any] = Field(default_factory=dict)
    landing_page: Optional[LandingPageSummary] = None
    status: str = "new"
    source: str = "landing_page"
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "LeadOut":
        dynamic = dict(row.get("dynamic_fields") or {})
        return cls(
            id=row["id"],
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            email=row.get("email"),
            phone=row.get("phone"),
            company=row.get("company"),
            message=row.get("message"),
            dynamic_fields=dynamic,
            all_form_data=merge_form_data(row, dynamic),
            landing_page=LandingPageSummary.from_prefixed(row),
            status=row.get("status") or "new",
            source=row.get("source") or "landing_page",
            ip_address=row.get("ip_address"),
            user_agent=row.get("user_agent"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


def merge_form_data(row: dict, dynamic: Dict[str, Any]) -> Dict[str, Any]:
    """Flat view of a lead: dynamic entries overlaid by the fixed attributes.

    Fixed attributes win on a key collision; unset fixed attributes do not
    mask a dynamic value of the same name.
    """
    data: Dict[str, Any] = dict(dynamic)
    for key, column in FIXED_LEAD_FIELDS.items():
        value = row.get(column)
        if value is not None:
            data[key] = value
        else:
            data.setdefault(key, None)
    return data
