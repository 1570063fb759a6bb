from datetime import datetime
from typing import Annotated, List, Optional

from leadhub.models.common import (
    CamelModel,
    LandingPageSummary,
    UserSummary,
    max_length,
    min_length,
)
from leadhub.models.user import UserOut


class GrantAccessRequest(CamelModel):
    sub_admin_id: int
    landing_page_id: int


class AdminAccessOut(CamelModel):
    id: int
    sub_admin: Optional[UserSummary] = None
    landing_page: Optional[LandingPageSummary] = None
    granted_by: Optional[UserSummary] = None
    status: str
    granted_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    revoked_by: Optional[UserSummary] = None

    @classmethod
    def from_row(cls, row: dict) -> "AdminAccessOut":
        return cls(
            id=row["id"],
            sub_admin=UserSummary.from_prefixed(row, "sub_admin", "sub_admin_id"),
            landing_page=LandingPageSummary.from_prefixed(row),
            granted_by=UserSummary.from_prefixed(row, "granted_by", "granted_by"),
            status=row["status"],
            granted_at=row.get("granted_at"),
            revoked_at=row.get("revoked_at"),
            revoked_by=UserSummary.from_prefixed(row, "revoked_by", "revoked_by"),
        )


class AccessRequestCreate(CamelModel):
    landing_page_id: int
    message: Optional[
        Annotated[str, max_length(500, "Message must be less than 500 characters")]
    ] = None


class AccessRequestApprove(CamelModel):
    landing_page_id: Optional[int] = None


class AccessRequestReject(CamelModel):
    reason: Annotated[str, min_length(5, "Rejection reason must be at least 5 characters")]


class AccessRequestOut(CamelModel):
    id: int
    sub_admin: Optional[UserSummary] = None
    landing_page: Optional[LandingPageSummary] = None
    status: str
    message: Optional[str] = None
    approved_by: Optional[UserSummary] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[UserSummary] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "AccessRequestOut":
        return cls(
            id=row["id"],
            sub_admin=UserSummary.from_prefixed(row, "sub_admin", "sub_admin_id"),
            landing_page=LandingPageSummary.from_prefixed(row),
            status=row["status"],
            message=row.get("message"),
            approved_by=UserSummary.from_prefixed(row, "approved_by", "approved_by"),
            approved_at=row.get("approved_at"),
            rejected_by=UserSummary.from_prefixed(row, "rejected_by", "rejected_by"),
            rejected_at=row.get("rejected_at"),
            rejection_reason=row.get("rejection_reason"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


def sub_admin_with_access(user: dict, access_rows: List[dict]) -> dict:
    """Sub-admin as sent to the console: profile plus its active grants."""
    data = UserOut.from_row(user).to_json()
    records = [AdminAccessOut.from_row(row) for row in access_rows]
    data["accessRecords"] = [record.to_json() for record in records]
    data["landingPages"] = [
        record.landing_page.to_json() for record in records if record.landing_page
    ]
    return data
