from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from leadhub.config import settings


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def create_token(user: Dict[str, Any]) -> str:
    """Signed token carrying identity only; authorization is checked per request."""
    payload = {
        "id": user["id"],
        "role": user["role"],
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """Raises ``jwt.InvalidTokenError`` for bad signatures or expired tokens."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
