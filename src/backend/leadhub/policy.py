"""Role capabilities, checked once per request before any operation runs.

Route handlers declare the action they perform with ``Depends(require(...))``;
nothing else in the code base compares roles for route-level access. Lead
visibility for sub-admins is narrowed further by ``ensure_landing_page_access``
because it depends on their access grants, not only on their role.
"""

from typing import Dict, FrozenSet

from leadhub.db import admin_access as access_db
from leadhub.errors import Forbidden
from leadhub.models.common import SUB_ADMIN, SUPER_ADMIN

ANY_ADMIN = frozenset({SUPER_ADMIN, SUB_ADMIN})
SUPER_ONLY = frozenset({SUPER_ADMIN})
SUB_ONLY = frozenset({SUB_ADMIN})

PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "profile:read": ANY_ADMIN,
    "profile:update": ANY_ADMIN,
    "users:approve": SUPER_ONLY,
    "sub_admins:manage": SUPER_ONLY,
    "access:manage": SUPER_ONLY,
    "landing_pages:read": ANY_ADMIN,
    "landing_pages:write": SUPER_ONLY,
    "landing_pages:test_form": SUPER_ONLY,
    "leads:read": ANY_ADMIN,
    "leads:read_all": SUPER_ONLY,
    "leads:update": ANY_ADMIN,
    "leads:delete": SUPER_ONLY,
    "access_requests:create": SUB_ONLY,
    "access_requests:read_own": SUB_ONLY,
    "access_requests:decide": SUPER_ONLY,
    "access_requests:delete": ANY_ADMIN,
    "dashboard:super_admin": SUPER_ONLY,
    "dashboard:sub_admin": SUB_ONLY,
    "sub_admin:self_service": SUB_ONLY,
}

# Actions a sub-admin may only perform once approved.
APPROVAL_REQUIRED = frozenset(
    {
        "leads:read",
        "leads:update",
        "dashboard:sub_admin",
        "sub_admin:self_service",
    }
)


def is_allowed(role: str, action: str) -> bool:
    return role in PERMISSIONS.get(action, frozenset())


def check(user: dict, action: str) -> None:
    if not is_allowed(user["role"], action):
        raise Forbidden(f"User role {user['role']} is not authorized to access this route")
    if (
        action in APPROVAL_REQUIRED
        and user["role"] == SUB_ADMIN
        and user.get("status") != "approved"
    ):
        raise Forbidden("Your account is pending approval or has been rejected")


def ensure_landing_page_access(cur, user: dict, landing_page_id: int, message: str) -> None:
    """Sub-admins need an active grant on the landing page; super admins pass."""
    if user["role"] == SUPER_ADMIN:
        return
    if landing_page_id not in access_db.active_landing_page_ids(cur, user["id"]):
        raise Forbidden(message)
