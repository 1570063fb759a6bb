from datetime import datetime
from typing import Callable, Optional

import jwt
from fastapi import Depends, Header, Query

from leadhub import policy
from leadhub.config import settings
from leadhub.db import users as users_db
from leadhub.db.postgres import get_db
from leadhub.errors import Unauthorized
from leadhub.models.common import LeadStatus
from leadhub.models.lead import LeadFilters
from leadhub.utils.pagination import PageParams
from leadhub.utils.logger import get_logger
from leadhub.utils.security import decode_token

logger = get_logger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    cur=Depends(get_db),
) -> dict:
    token = _bearer_token(authorization)
    if not token:
        raise Unauthorized()
    try:
        claims = decode_token(token)
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthorized()
    user = users_db.get_user(cur, claims.get("id"))
    if not user:
        raise Unauthorized()
    return user


def require(action: str) -> Callable[..., dict]:
    """Dependency factory: authenticated user allowed to perform ``action``."""

    def dependency(user: dict = Depends(get_current_user)) -> dict:
        policy.check(user, action)
        return user

    return dependency


def lead_filters(
    status: Optional[LeadStatus] = Query(None),
    landing_page: Optional[int] = Query(None, alias="landingPage"),
    search: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
) -> LeadFilters:
    """Lead list/report query string, before any role scoping."""
    return LeadFilters(
        landing_page_ids=[landing_page] if landing_page is not None else None,
        status=status,
        search=(search or "").strip() or None,
        start_date=start_date,
        end_date=end_date,
    )


def page_query(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
) -> PageParams:
    return PageParams(page=page, limit=limit)
