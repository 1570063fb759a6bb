from typing import Any, Dict, List, Optional, Tuple

from psycopg2 import errors as pg_errors

from leadhub.db.query import date_range, escape_like, where_clause
from leadhub.errors import ValidationError
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

DUPLICATE_EMAIL = "User already exists with this email"

USER_COLUMNS = """
    id, name, email, password_hash, role, status, company_name, phone,
    approved_by, approved_at, rejected_by, rejected_at, rejection_reason,
    created_at, updated_at
"""

USER_FIELDS = {
    "name",
    "email",
    "password_hash",
    "status",
    "company_name",
    "phone",
    "approved_by",
    "approved_at",
    "rejected_by",
    "rejected_at",
    "rejection_reason",
}


def get_user(cur, user_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
    return cur.fetchone()


def get_user_by_email(cur, email: str) -> Optional[Dict[str, Any]]:
    cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s", (email.lower(),))
    return cur.fetchone()


def get_users(cur, user_ids: List[int]) -> List[Dict[str, Any]]:
    if not user_ids:
        return []
    cur.execute(
        f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY(%s)", (list(user_ids),)
    )
    return cur.fetchall()


def create_user(
    cur,
    *,
    name: str,
    email: str,
    password_hash: str,
    role: str,
    status: str,
    company_name: Optional[str] = None,
    phone: Optional[str] = None,
    approved_by: Optional[int] = None,
    approved_at=None,
) -> Dict[str, Any]:
    try:
        cur.execute(
            f"""
            INSERT INTO users (
                name, email, password_hash, role, status, company_name, phone,
                approved_by, approved_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {USER_COLUMNS}
            """,
            (
                name,
                email.lower(),
                password_hash,
                role,
                status,
                company_name,
                phone,
                approved_by,
                approved_at,
            ),
        )
    except pg_errors.UniqueViolation:
        # lost a race with a concurrent insert of the same email
        raise ValidationError(DUPLICATE_EMAIL)
    row = cur.fetchone()
    logger.info("Created user id=%s role=%s status=%s", row["id"], role, status)
    return row


def update_user(cur, user_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    allowed = {k: v for k, v in updates.items() if k in USER_FIELDS}
    if not allowed:
        return get_user(cur, user_id)

    expressions = [f"{field} = %s" for field in allowed]
    values: List[Any] = list(allowed.values())
    values.append(user_id)
    cur.execute(
        f"UPDATE users SET {', '.join(expressions)}, updated_at = NOW() "
        f"WHERE id = %s RETURNING {USER_COLUMNS}",
        tuple(values),
    )
    return cur.fetchone()


def delete_user(cur, user_id: int) -> bool:
    cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
    return cur.rowcount > 0


def list_users(
    cur,
    *,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    since=None,
    until=None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    clauses: List[str] = []
    params: List[Any] = []
    if role:
        clauses.append("role = %s")
        params.append(role)
    if status:
        clauses.append("status = %s")
        params.append(status)
    if search:
        pattern = f"%{escape_like(search)}%"
        clauses.append("(name ILIKE %s OR email ILIKE %s OR company_name ILIKE %s)")
        params.extend([pattern, pattern, pattern])
    range_clauses, range_params = date_range("created_at", since, until)
    clauses.extend(range_clauses)
    params.extend(range_params)
    where = where_clause(clauses)

    cur.execute(f"SELECT COUNT(*)::INT AS total FROM users {where}", tuple(params))
    total = cur.fetchone()["total"]

    sql = f"SELECT {USER_COLUMNS} FROM users {where} ORDER BY created_at DESC"
    page_params = list(params)
    if limit is not None:
        sql += " LIMIT %s OFFSET %s"
        page_params.extend([limit, offset])
    cur.execute(sql, tuple(page_params))
    return cur.fetchall(), total
