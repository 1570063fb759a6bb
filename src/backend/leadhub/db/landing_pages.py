from typing import Any, Dict, List, Optional, Tuple

from psycopg2.extras import Json

from leadhub.db.query import escape_like, where_clause
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

LANDING_PAGE_COLUMNS = """
    lp.id, lp.name, lp.url, lp.description, lp.status, lp.form_fields,
    lp.include_default_fields, lp.created_by, lp.created_at, lp.updated_at,
    u.name AS created_by_name, u.email AS created_by_email
"""

LANDING_PAGE_FIELDS = {
    "name",
    "url",
    "description",
    "status",
    "form_fields",
    "include_default_fields",
}
JSON_FIELDS = {"form_fields", "include_default_fields"}

_SELECT = f"""
    SELECT {LANDING_PAGE_COLUMNS}
    FROM landing_pages lp
    LEFT JOIN users u ON u.id = lp.created_by
"""


def _adapt(field: str, value: Any) -> Any:
    return Json(value) if field in JSON_FIELDS else value


def get_landing_page(cur, landing_page_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"{_SELECT} WHERE lp.id = %s", (landing_page_id,))
    return cur.fetchone()


def find_conflicting_landing_page(
    cur,
    *,
    name: Optional[str] = None,
    url: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """Return a landing page other than ``exclude_id`` sharing the name or url."""
    matches: List[str] = []
    params: List[Any] = []
    if name:
        matches.append("lp.name = %s")
        params.append(name)
    if url:
        matches.append("lp.url = %s")
        params.append(url)
    if not matches:
        return None
    clauses = [f"({' OR '.join(matches)})"]
    if exclude_id is not None:
        clauses.append("lp.id <> %s")
        params.append(exclude_id)
    cur.execute(f"{_SELECT} {where_clause(clauses)} LIMIT 1", tuple(params))
    return cur.fetchone()


def create_landing_page(
    cur,
    *,
    name: str,
    url: str,
    description: Optional[str],
    status: str,
    form_fields: List[Dict[str, Any]],
    include_default_fields: Dict[str, bool],
    created_by: int,
) -> Dict[str, Any]:
    cur.execute(
        """
        INSERT INTO landing_pages (
            name, url, description, status, form_fields, include_default_fields, created_by
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING id
        """,
        (
            name,
            url,
            description,
            status,
            Json(form_fields),
            Json(include_default_fields),
            created_by,
        ),
    )
    landing_page_id = cur.fetchone()["id"]
    logger.info("Created landing page id=%s name=%s", landing_page_id, name)
    return get_landing_page(cur, landing_page_id)


def update_landing_page(
    cur, landing_page_id: int, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    allowed = {k: v for k, v in updates.items() if k in LANDING_PAGE_FIELDS}
    if allowed:
        expressions = [f"{field} = %s" for field in allowed]
        values: List[Any] = [_adapt(field, value) for field, value in allowed.items()]
        values.append(landing_page_id)
        cur.execute(
            f"UPDATE landing_pages SET {', '.join(expressions)}, updated_at = NOW() "
            "WHERE id = %s",
            tuple(values),
        )
        logger.info(
            "Updated landing page id=%s fields=%s", landing_page_id, sorted(allowed)
        )
    return get_landing_page(cur, landing_page_id)


def delete_landing_page(cur, landing_page_id: int) -> bool:
    cur.execute("DELETE FROM landing_pages WHERE id = %s", (landing_page_id,))
    return cur.rowcount > 0


def list_landing_pages(
    cur,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    clauses: List[str] = []
    params: List[Any] = []
    if status:
        clauses.append("lp.status = %s")
        params.append(status)
    if search:
        clauses.append("lp.name ILIKE %s")
        params.append(f"%{escape_like(search)}%")
    where = where_clause(clauses)

    cur.execute(
        f"SELECT COUNT(*)::INT AS total FROM landing_pages lp {where}", tuple(params)
    )
    total = cur.fetchone()["total"]

    sql = f"{_SELECT} {where} ORDER BY lp.created_at DESC"
    page_params = list(params)
    if limit is not None:
        sql += " LIMIT %s OFFSET %s"
        page_params.extend([limit, offset])
    cur.execute(sql, tuple(page_params))
    return cur.fetchall(), total
