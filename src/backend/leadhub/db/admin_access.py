from typing import Any, Dict, List, Optional

from leadhub.db.query import where_clause
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

ACCESS_FIELDS = {"status", "granted_by", "granted_at", "revoked_at", "revoked_by"}

_SELECT = """
    SELECT
        aa.id, aa.sub_admin_id, aa.landing_page_id, aa.granted_by, aa.status,
        aa.granted_at, aa.revoked_at, aa.revoked_by,
        sa.name AS sub_admin_name, sa.email AS sub_admin_email,
        sa.company_name AS sub_admin_company_name,
        lp.name AS landing_page_name, lp.url AS landing_page_url,
        lp.description AS landing_page_description, lp.status AS landing_page_status,
        gb.name AS granted_by_name, gb.email AS granted_by_email,
        rb.name AS revoked_by_name, rb.email AS revoked_by_email
    FROM admin_access aa
    JOIN users sa ON sa.id = aa.sub_admin_id
    JOIN landing_pages lp ON lp.id = aa.landing_page_id
    LEFT JOIN users gb ON gb.id = aa.granted_by
    LEFT JOIN users rb ON rb.id = aa.revoked_by
"""


def get_access(cur, access_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"{_SELECT} WHERE aa.id = %s", (access_id,))
    return cur.fetchone()


def find_access(cur, sub_admin_id: int, landing_page_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(
        f"{_SELECT} WHERE aa.sub_admin_id = %s AND aa.landing_page_id = %s",
        (sub_admin_id, landing_page_id),
    )
    return cur.fetchone()


def create_access(
    cur, *, sub_admin_id: int, landing_page_id: int, granted_by: int
) -> Dict[str, Any]:
    cur.execute(
        """
        INSERT INTO admin_access (sub_admin_id, landing_page_id, granted_by, status)
        VALUES (%s, %s, %s, 'active')
        RETURNING id
        """,
        (sub_admin_id, landing_page_id, granted_by),
    )
    access_id = cur.fetchone()["id"]
    logger.info(
        "Granted access id=%s sub_admin=%s landing_page=%s",
        access_id,
        sub_admin_id,
        landing_page_id,
    )
    return get_access(cur, access_id)


def update_access(cur, access_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    allowed = {k: v for k, v in updates.items() if k in ACCESS_FIELDS}
    if allowed:
        expressions = [f"{field} = %s" for field in allowed]
        values: List[Any] = list(allowed.values())
        values.append(access_id)
        cur.execute(
            f"UPDATE admin_access SET {', '.join(expressions)} WHERE id = %s",
            tuple(values),
        )
    return get_access(cur, access_id)


def list_access(
    cur,
    *,
    sub_admin_id: Optional[int] = None,
    landing_page_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if sub_admin_id is not None:
        clauses.append("aa.sub_admin_id = %s")
        params.append(sub_admin_id)
    if landing_page_id is not None:
        clauses.append("aa.landing_page_id = %s")
        params.append(landing_page_id)
    if status:
        clauses.append("aa.status = %s")
        params.append(status)
    cur.execute(
        f"{_SELECT} {where_clause(clauses)} ORDER BY aa.granted_at DESC", tuple(params)
    )
    return cur.fetchall()


def active_landing_page_ids(cur, sub_admin_id: int) -> List[int]:
    cur.execute(
        "SELECT landing_page_id FROM admin_access WHERE sub_admin_id = %s AND status = 'active'",
        (sub_admin_id,),
    )
    return [row["landing_page_id"] for row in cur.fetchall()]


def all_landing_page_ids(cur, sub_admin_id: int) -> List[int]:
    """Every landing page the sub-admin has or had a record for, any status."""
    cur.execute(
        "SELECT DISTINCT landing_page_id FROM admin_access WHERE sub_admin_id = %s",
        (sub_admin_id,),
    )
    return [row["landing_page_id"] for row in cur.fetchall()]


def deactivate_access_for_sub_admin(cur, sub_admin_id: int) -> int:
    cur.execute(
        "UPDATE admin_access SET status = 'inactive' WHERE sub_admin_id = %s AND status = 'active'",
        (sub_admin_id,),
    )
    return cur.rowcount


def delete_access_for_sub_admin(cur, sub_admin_id: int) -> int:
    cur.execute("DELETE FROM admin_access WHERE sub_admin_id = %s", (sub_admin_id,))
    return cur.rowcount
