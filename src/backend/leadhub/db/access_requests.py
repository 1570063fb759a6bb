from typing import Any, Dict, List, Optional, Tuple

from leadhub.db.query import where_clause
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_FIELDS = {
    "status",
    "approved_by",
    "approved_at",
    "rejected_by",
    "rejected_at",
    "rejection_reason",
}

_SELECT = """
    SELECT
        ar.id, ar.sub_admin_id, ar.landing_page_id, ar.status, ar.message,
        ar.approved_by, ar.approved_at, ar.rejected_by, ar.rejected_at,
        ar.rejection_reason, ar.created_at, ar.updated_at,
        sa.name AS sub_admin_name, sa.email AS sub_admin_email,
        sa.company_name AS sub_admin_company_name,
        lp.name AS landing_page_name, lp.url AS landing_page_url,
        ab.name AS approved_by_name, ab.email AS approved_by_email,
        rb.name AS rejected_by_name, rb.email AS rejected_by_email
    FROM access_requests ar
    JOIN users sa ON sa.id = ar.sub_admin_id
    JOIN landing_pages lp ON lp.id = ar.landing_page_id
    LEFT JOIN users ab ON ab.id = ar.approved_by
    LEFT JOIN users rb ON rb.id = ar.rejected_by
"""


def get_access_request(cur, request_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"{_SELECT} WHERE ar.id = %s", (request_id,))
    return cur.fetchone()


def find_open_request(
    cur, sub_admin_id: int, landing_page_id: int
) -> Optional[Dict[str, Any]]:
    """Pending or approved request for the pair, if any."""
    cur.execute(
        f"""
        {_SELECT}
        WHERE ar.sub_admin_id = %s AND ar.landing_page_id = %s
          AND ar.status IN ('pending', 'approved')
        ORDER BY ar.created_at DESC
        LIMIT 1
        """,
        (sub_admin_id, landing_page_id),
    )
    return cur.fetchone()


def create_access_request(
    cur, *, sub_admin_id: int, landing_page_id: int, message: Optional[str]
) -> Dict[str, Any]:
    cur.execute(
        """
        INSERT INTO access_requests (sub_admin_id, landing_page_id, message)
        VALUES (%s, %s, %s)
        RETURNING id
        """,
        (sub_admin_id, landing_page_id, message),
    )
    request_id = cur.fetchone()["id"]
    logger.info(
        "Created access request id=%s sub_admin=%s landing_page=%s",
        request_id,
        sub_admin_id,
        landing_page_id,
    )
    return get_access_request(cur, request_id)


def update_access_request(
    cur, request_id: int, updates: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    allowed = {k: v for k, v in updates.items() if k in REQUEST_FIELDS}
    if allowed:
        expressions = [f"{field} = %s" for field in allowed]
        values: List[Any] = list(allowed.values())
        values.append(request_id)
        cur.execute(
            f"UPDATE access_requests SET {', '.join(expressions)}, updated_at = NOW() "
            "WHERE id = %s",
            tuple(values),
        )
    return get_access_request(cur, request_id)


def delete_access_request(cur, request_id: int) -> bool:
    cur.execute("DELETE FROM access_requests WHERE id = %s", (request_id,))
    return cur.rowcount > 0


def list_access_requests(
    cur,
    *,
    status: Optional[str] = None,
    sub_admin_id: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    clauses: List[str] = []
    params: List[Any] = []
    if status:
        clauses.append("ar.status = %s")
        params.append(status)
    if sub_admin_id is not None:
        clauses.append("ar.sub_admin_id = %s")
        params.append(sub_admin_id)
    where = where_clause(clauses)

    cur.execute(
        f"SELECT COUNT(*)::INT AS total FROM access_requests ar {where}", tuple(params)
    )
    total = cur.fetchone()["total"]

    sql = f"{_SELECT} {where} ORDER BY ar.created_at DESC"
    page_params = list(params)
    if limit is not None:
        sql += " LIMIT %s OFFSET %s"
        page_params.extend([limit, offset])
    cur.execute(sql, tuple(page_params))
    return cur.fetchall(), total


def count_by_status(cur) -> Dict[str, int]:
    cur.execute(
        "SELECT status, COUNT(*)::INT AS count FROM access_requests GROUP BY status"
    )
    return {row["status"]: row["count"] for row in cur.fetchall()}
