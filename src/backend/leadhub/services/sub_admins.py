"""Super-admin management of sub-admin accounts."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from leadhub.db import admin_access as access_db
from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import leads as leads_db
from leadhub.db import users as users_db
from leadhub.errors import Conflict, NotFound, ValidationError
from leadhub.models.common import SUB_ADMIN
from leadhub.services import access as access_service
from leadhub.utils.logger import get_logger
from leadhub.utils.security import hash_password

logger = get_logger(__name__)

UNSET = object()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _load_active_landing_page(cur, landing_page_id: int) -> Dict[str, Any]:
    landing_page = landing_pages_db.get_landing_page(cur, landing_page_id)
    if not landing_page or landing_page["status"] != "active":
        raise ValidationError("Invalid landing page")
    return landing_page


def _status_updates(approver: Dict[str, Any], status: str) -> Dict[str, Any]:
    updates: Dict[str, Any] = {"status": status}
    if status == "approved":
        updates.update(approved_by=approver["id"], approved_at=_now())
    elif status == "rejected":
        updates.update(rejected_by=approver["id"], rejected_at=_now())
    return updates


def get_sub_admin(cur, user_id: int) -> Dict[str, Any]:
    user = users_db.get_user(cur, user_id)
    if not user or user["role"] != SUB_ADMIN:
        raise NotFound("Sub admin not found")
    return user


def create_sub_admin(
    cur,
    creator: Dict[str, Any],
    *,
    name: str,
    email: str,
    password: str,
    company_name: str,
    phone: Optional[str] = None,
    status: str = "approved",
    landing_page_id: Optional[int] = None,
) -> Dict[str, Any]:
    if users_db.get_user_by_email(cur, email):
        raise ValidationError(users_db.DUPLICATE_EMAIL)
    if landing_page_id is not None:
        _load_active_landing_page(cur, landing_page_id)

    approved = status == "approved"
    user = users_db.create_user(
        cur,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=SUB_ADMIN,
        status=status,
        company_name=company_name,
        phone=phone or None,
        approved_by=creator["id"] if approved else None,
        approved_at=_now() if approved else None,
    )
    if landing_page_id is not None:
        access_service.upsert_grant(
            cur,
            sub_admin_id=user["id"],
            landing_page_id=landing_page_id,
            granted_by=creator["id"],
        )
    logger.info("Sub admin id=%s created by id=%s", user["id"], creator["id"])
    return user


def list_sub_admins(
    cur,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Tuple[Dict[str, Any], List[Dict[str, Any]]]], int]:
    """Sub-admins newest first, each paired with its active access records."""
    rows, total = users_db.list_users(
        cur, role=SUB_ADMIN, status=status, search=search, limit=limit, offset=offset
    )
    return [
        (row, access_db.list_access(cur, sub_admin_id=row["id"], status="active"))
        for row in rows
    ], total


def update_sub_admin(
    cur,
    updater: Dict[str, Any],
    user_id: int,
    *,
    name: Optional[str] = None,
    company_name: Optional[str] = None,
    phone: Optional[str] = None,
    status: Optional[str] = None,
    landing_page_id: Any = UNSET,
) -> Dict[str, Any]:
    """Partial update. ``landing_page_id`` left as ``UNSET`` keeps the grants;
    ``None`` clears them and an id reassigns the sub-admin to that page."""
    get_sub_admin(cur, user_id)

    updates = {
        key: value
        for key, value in (("name", name), ("company_name", company_name), ("phone", phone))
        if value is not None
    }
    if status is not None:
        updates.update(_status_updates(updater, status))
    user = users_db.update_user(cur, user_id, updates)

    if landing_page_id is not UNSET:
        access_service.reassign_access(cur, updater, user_id, landing_page_id)
    logger.info("Sub admin id=%s updated by id=%s", user_id, updater["id"])
    return user


def delete_sub_admin(cur, remover: Dict[str, Any], user_id: int) -> None:
    get_sub_admin(cur, user_id)
    lead_count = leads_db.count_leads(cur, access_db.all_landing_page_ids(cur, user_id))
    if lead_count > 0:
        raise Conflict(
            f"Cannot delete sub admin. There are {lead_count} leads associated "
            "with their landing pages."
        )
    access_db.delete_access_for_sub_admin(cur, user_id)
    users_db.delete_user(cur, user_id)
    logger.info("Sub admin id=%s deleted by id=%s", user_id, remover["id"])
