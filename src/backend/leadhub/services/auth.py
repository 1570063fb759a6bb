from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from leadhub.db import users as users_db
from leadhub.errors import (
    Conflict,
    Forbidden,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    ValidationError,
)
from leadhub.models.common import SUB_ADMIN
from leadhub.utils.logger import get_logger
from leadhub.utils.security import create_token, hash_password, verify_password

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def register(
    cur,
    *,
    name: str,
    email: str,
    password: str,
    company_name: str,
    phone: str,
) -> Dict[str, Any]:
    """Self-registration of a sub-admin. Returns ``{"user", "token"}``.

    The token is issued right away even though the account is pending; it
    only proves identity, and the approval checks gate what it can reach.
    """
    if users_db.get_user_by_email(cur, email):
        raise ValidationError(users_db.DUPLICATE_EMAIL)

    user = users_db.create_user(
        cur,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=SUB_ADMIN,
        status="pending",
        company_name=company_name,
        phone=phone,
    )
    return {"user": user, "token": create_token(user)}


def authenticate(cur, *, email: str, password: str) -> Dict[str, Any]:
    user = users_db.get_user_by_email(cur, email)
    # same answer for unknown email and wrong password
    if not user or not verify_password(user["password_hash"], password):
        raise InvalidCredentials()
    if user["role"] == SUB_ADMIN and user["status"] != "approved":
        raise Forbidden("Your account is pending approval or has been rejected")
    logger.info("User id=%s logged in", user["id"])
    return {"user": user, "token": create_token(user)}


def update_profile(
    cur,
    user: Dict[str, Any],
    *,
    name: Optional[str] = None,
    company_name: Optional[str] = None,
    phone: Optional[str] = None,
) -> Dict[str, Any]:
    updates = {
        key: value
        for key, value in (("name", name), ("company_name", company_name), ("phone", phone))
        if value is not None
    }
    return users_db.update_user(cur, user["id"], updates)


def change_password(
    cur, user: Dict[str, Any], *, current_password: str, new_password: str
) -> Dict[str, Any]:
    if not verify_password(user["password_hash"], current_password):
        raise Unauthorized("Password is incorrect")
    updated = users_db.update_user(
        cur, user["id"], {"password_hash": hash_password(new_password)}
    )
    logger.info("Password changed for user id=%s", user["id"])
    return {"user": updated, "token": create_token(updated)}


def reset_password(cur, email: str, new_password: str) -> Dict[str, Any]:
    """Operator reset: set a new password without knowing the current one."""
    user = users_db.get_user_by_email(cur, email)
    if not user:
        raise NotFound("User not found")
    updated = users_db.update_user(
        cur, user["id"], {"password_hash": hash_password(new_password)}
    )
    logger.info("Password reset for user id=%s", user["id"])
    return updated


def list_pending_users(cur) -> List[Dict[str, Any]]:
    rows, _ = users_db.list_users(cur, role=SUB_ADMIN, status="pending")
    return rows


def _load_sub_admin_target(cur, user_id: int, verb: str) -> Dict[str, Any]:
    target = users_db.get_user(cur, user_id)
    if not target:
        raise NotFound("User not found")
    if target["role"] != SUB_ADMIN:
        raise Conflict(f"Can only {verb} sub admin users")
    return target


def approve_user(cur, approver: Dict[str, Any], user_id: int) -> Dict[str, Any]:
    target = _load_sub_admin_target(cur, user_id, "approve")
    if target["status"] == "approved":
        raise Conflict("User is already approved")
    updated = users_db.update_user(
        cur,
        user_id,
        {"status": "approved", "approved_by": approver["id"], "approved_at": _now()},
    )
    logger.info("User id=%s approved by id=%s", user_id, approver["id"])
    return updated


def reject_user(
    cur, approver: Dict[str, Any], user_id: int, reason: Optional[str] = None
) -> Dict[str, Any]:
    target = _load_sub_admin_target(cur, user_id, "reject")
    if target["status"] == "rejected":
        raise Conflict("User is already rejected")
    updated = users_db.update_user(
        cur,
        user_id,
        {
            "status": "rejected",
            "rejected_by": approver["id"],
            "rejected_at": _now(),
            "rejection_reason": reason,
        },
    )
    logger.info("User id=%s rejected by id=%s", user_id, approver["id"])
    return updated
