"""Access grants and the access-request workflow.

There is at most one ``admin_access`` row per (sub-admin, landing page):
granting again reactivates the existing row instead of inserting a second
one, and revoking only flips its status so the history stays auditable.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from leadhub.db import access_requests as requests_db
from leadhub.db import admin_access as access_db
from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import users as users_db
from leadhub.errors import Conflict, Forbidden, NotFound, ValidationError
from leadhub.models.common import SUB_ADMIN, SUPER_ADMIN
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def upsert_grant(
    cur, *, sub_admin_id: int, landing_page_id: int, granted_by: int
) -> Tuple[Dict[str, Any], str]:
    """Create or reactivate the grant for the pair.

    Returns ``(record, outcome)`` with outcome ``created``, ``reactivated`` or
    ``unchanged`` (already active).
    """
    existing = access_db.find_access(cur, sub_admin_id, landing_page_id)
    if existing is None:
        record = access_db.create_access(
            cur,
            sub_admin_id=sub_admin_id,
            landing_page_id=landing_page_id,
            granted_by=granted_by,
        )
        return record, "created"
    if existing["status"] == "active":
        return existing, "unchanged"
    record = access_db.update_access(
        cur,
        existing["id"],
        {
            "status": "active",
            "granted_by": granted_by,
            "granted_at": _now(),
            "revoked_at": None,
            "revoked_by": None,
        },
    )
    logger.info(
        "Reactivated access id=%s sub_admin=%s landing_page=%s",
        existing["id"],
        sub_admin_id,
        landing_page_id,
    )
    return record, "reactivated"


def grant_access(
    cur, granter: Dict[str, Any], sub_admin_id: int, landing_page_id: int
) -> Tuple[Dict[str, Any], bool]:
    """Grant a sub-admin access to a landing page.

    Returns ``(record, created)``; ``created`` is False when an inactive or
    revoked record was reactivated.
    """
    sub_admin = users_db.get_user(cur, sub_admin_id)
    if not sub_admin or sub_admin["role"] != SUB_ADMIN or sub_admin["status"] != "approved":
        raise ValidationError("Invalid sub admin or not approved")
    if not landing_pages_db.get_landing_page(cur, landing_page_id):
        raise ValidationError("Landing page not found")

    record, outcome = upsert_grant(
        cur,
        sub_admin_id=sub_admin_id,
        landing_page_id=landing_page_id,
        granted_by=granter["id"],
    )
    if outcome == "unchanged":
        raise Conflict("Access already granted")
    return record, outcome == "created"


def revoke_access(cur, revoker: Dict[str, Any], access_id: int) -> Dict[str, Any]:
    record = access_db.get_access(cur, access_id)
    if not record:
        raise NotFound("Access record not found")
    if record["status"] == "revoked":
        raise Conflict("Access is already revoked")
    updated = access_db.update_access(
        cur,
        access_id,
        {"status": "revoked", "revoked_at": _now(), "revoked_by": revoker["id"]},
    )
    logger.info("Revoked access id=%s by id=%s", access_id, revoker["id"])
    return updated


def reassign_access(
    cur, granter: Dict[str, Any], sub_admin_id: int, landing_page_id: Optional[int]
) -> List[Dict[str, Any]]:
    """Replace the sub-admin's active grants with one for ``landing_page_id``.

    ``None`` clears every active grant. The target page is checked before
    anything is written.
    """
    if landing_page_id is not None:
        landing_page = landing_pages_db.get_landing_page(cur, landing_page_id)
        if not landing_page or landing_page["status"] != "active":
            raise ValidationError("Invalid landing page")

    deactivated = access_db.deactivate_access_for_sub_admin(cur, sub_admin_id)
    logger.info("Deactivated %s grant(s) for sub_admin=%s", deactivated, sub_admin_id)
    if landing_page_id is not None:
        upsert_grant(
            cur,
            sub_admin_id=sub_admin_id,
            landing_page_id=landing_page_id,
            granted_by=granter["id"],
        )
    return list_by_sub_admin(cur, sub_admin_id, status="active")


def list_by_sub_admin(
    cur, sub_admin_id: int, status: Optional[str] = None
) -> List[Dict[str, Any]]:
    return access_db.list_access(cur, sub_admin_id=sub_admin_id, status=status)


def list_by_landing_page(
    cur, landing_page_id: int, status: Optional[str] = None
) -> List[Dict[str, Any]]:
    return access_db.list_access(cur, landing_page_id=landing_page_id, status=status)


def list_all(cur, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return access_db.list_access(cur, status=status)


# --- access requests -----------------------------------------------------------------------

def create_request(
    cur, sub_admin: Dict[str, Any], landing_page_id: int, message: Optional[str] = None
) -> Dict[str, Any]:
    message = message or None
    landing_page = landing_pages_db.get_landing_page(cur, landing_page_id)
    if not landing_page or landing_page["status"] != "active":
        raise ValidationError("Invalid landing page")

    existing = requests_db.find_open_request(cur, sub_admin["id"], landing_page_id)
    if existing:
        if existing["status"] == "approved":
            raise Conflict("You already have access to this landing page")
        raise Conflict("You already have a pending request for this landing page")

    return requests_db.create_access_request(
        cur,
        sub_admin_id=sub_admin["id"],
        landing_page_id=landing_page_id,
        message=message,
    )


def list_requests(
    cur,
    *,
    status: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    return requests_db.list_access_requests(cur, status=status, limit=limit, offset=offset)


def list_my_requests(cur, sub_admin: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows, _ = requests_db.list_access_requests(cur, sub_admin_id=sub_admin["id"])
    return rows


def _load_pending_request(cur, request_id: int) -> Dict[str, Any]:
    access_request = requests_db.get_access_request(cur, request_id)
    if not access_request:
        raise NotFound("Access request not found")
    if access_request["status"] != "pending":
        raise Conflict("Access request is not pending")
    return access_request


def approve_request(
    cur,
    approver: Dict[str, Any],
    request_id: int,
    landing_page_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Mark the request approved, then create or reactivate the grant.

    Both writes share the request's transaction (see ``db.postgres.get_db``).
    """
    access_request = _load_pending_request(cur, request_id)
    target_page_id = landing_page_id or access_request["landing_page_id"]
    if not landing_pages_db.get_landing_page(cur, target_page_id):
        raise ValidationError("Landing page not found")

    updated = requests_db.update_access_request(
        cur,
        request_id,
        {"status": "approved", "approved_by": approver["id"], "approved_at": _now()},
    )
    upsert_grant(
        cur,
        sub_admin_id=access_request["sub_admin_id"],
        landing_page_id=target_page_id,
        granted_by=approver["id"],
    )
    logger.info("Access request id=%s approved by id=%s", request_id, approver["id"])
    return updated


def reject_request(
    cur, rejecter: Dict[str, Any], request_id: int, reason: str
) -> Dict[str, Any]:
    _load_pending_request(cur, request_id)
    updated = requests_db.update_access_request(
        cur,
        request_id,
        {
            "status": "rejected",
            "rejected_by": rejecter["id"],
            "rejected_at": _now(),
            "rejection_reason": reason,
        },
    )
    logger.info("Access request id=%s rejected by id=%s", request_id, rejecter["id"])
    return updated


def delete_request(cur, user: Dict[str, Any], request_id: int) -> None:
    access_request = requests_db.get_access_request(cur, request_id)
    if not access_request:
        raise NotFound("Access request not found")
    if user["role"] != SUPER_ADMIN and access_request["sub_admin_id"] != user["id"]:
        raise Forbidden("Not authorized to delete this access request")
    requests_db.delete_access_request(cur, request_id)
    logger.info("Access request id=%s deleted by id=%s", request_id, user["id"])
