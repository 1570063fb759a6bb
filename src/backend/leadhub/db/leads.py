from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from psycopg2.extras import Json

from leadhub.db.query import date_range, escape_like, where_clause
from leadhub.models.lead import LeadFilters
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

LEAD_FIELDS = {
    "first_name",
    "last_name",
    "email",
    "phone",
    "company",
    "message",
    "status",
}

_SELECT = """
    SELECT
        l.id, l.first_name, l.last_name, l.email, l.phone, l.company, l.message,
        l.dynamic_fields, l.landing_page_id, l.status, l.source, l.ip_address,
        l.user_agent, l.created_at, l.updated_at,
        lp.name AS landing_page_name, lp.url AS landing_page_url
    FROM leads l
    LEFT JOIN landing_pages lp ON lp.id = l.landing_page_id
"""


def build_lead_filters(filters: LeadFilters) -> Tuple[List[str], List[Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if filters.landing_page_ids is not None:
        clauses.append("l.landing_page_id = ANY(%s)")
        params.append(list(filters.landing_page_ids))
    if filters.status:
        clauses.append("l.status = %s")
        params.append(filters.status)
    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        clauses.append(
            "(l.first_name ILIKE %s OR l.last_name ILIKE %s OR l.email ILIKE %s)"
        )
        params.extend([pattern, pattern, pattern])
    range_clauses, range_params = date_range(
        "l.created_at", filters.start_date, filters.end_date
    )
    clauses.extend(range_clauses)
    params.extend(range_params)
    return clauses, params


def create_lead(cur, lead: Dict[str, Any]) -> Dict[str, Any]:
    cur.execute(
        """
        INSERT INTO leads (
            first_name, last_name, email, phone, company, message, dynamic_fields,
            landing_page_id, status, source, ip_address, user_agent
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id
        """,
        (
            lead.get("first_name"),
            lead.get("last_name"),
            lead.get("email"),
            lead.get("phone"),
            lead.get("company"),
            lead.get("message"),
            Json(lead.get("dynamic_fields") or {}),
            lead["landing_page_id"],
            lead.get("status", "new"),
            lead.get("source", "landing_page"),
            lead.get("ip_address"),
            lead.get("user_agent"),
        ),
    )
    lead_id = cur.fetchone()["id"]
    logger.info(
        "Lead created successfully id=%s landing_page=%s", lead_id, lead["landing_page_id"]
    )
    return get_lead(cur, lead_id)


def get_lead(cur, lead_id: int) -> Optional[Dict[str, Any]]:
    cur.execute(f"{_SELECT} WHERE l.id = %s", (lead_id,))
    return cur.fetchone()


def update_lead(cur, lead_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    allowed = {k: v for k, v in updates.items() if k in LEAD_FIELDS}
    if allowed:
        expressions = [f"{field} = %s" for field in allowed]
        values: List[Any] = list(allowed.values())
        values.append(lead_id)
        cur.execute(
            f"UPDATE leads SET {', '.join(expressions)}, updated_at = NOW() WHERE id = %s",
            tuple(values),
        )
    return get_lead(cur, lead_id)


def delete_lead(cur, lead_id: int) -> bool:
    cur.execute("DELETE FROM leads WHERE id = %s", (lead_id,))
    return cur.rowcount > 0


def count_leads(cur, landing_page_ids: List[int]) -> int:
    if not landing_page_ids:
        return 0
    cur.execute(
        "SELECT COUNT(*)::INT AS total FROM leads WHERE landing_page_id = ANY(%s)",
        (list(landing_page_ids),),
    )
    return cur.fetchone()["total"]


def list_leads(
    cur,
    filters: LeadFilters,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    clauses, params = build_lead_filters(filters)
    where = where_clause(clauses)

    cur.execute(f"SELECT COUNT(*)::INT AS total FROM leads l {where}", tuple(params))
    total = cur.fetchone()["total"]

    sql = f"{_SELECT} {where} ORDER BY l.created_at DESC, l.id DESC"
    page_params = list(params)
    if limit is not None:
        sql += " LIMIT %s OFFSET %s"
        page_params.extend([limit, offset])
    cur.execute(sql, tuple(page_params))
    return cur.fetchall(), total


def count_by_status(cur, filters: LeadFilters) -> Dict[str, int]:
    clauses, params = build_lead_filters(filters)
    cur.execute(
        f"SELECT l.status, COUNT(*)::INT AS count FROM leads l {where_clause(clauses)} "
        "GROUP BY l.status",
        tuple(params),
    )
    return {row["status"]: row["count"] for row in cur.fetchall()}


def count_by_day(cur, filters: LeadFilters, since: datetime) -> List[Dict[str, Any]]:
    clauses, params = build_lead_filters(filters)
    clauses.append("l.created_at >= %s")
    params.append(since)
    cur.execute(
        f"""
        SELECT TO_CHAR(l.created_at AT TIME ZONE 'UTC', 'YYYY-MM-DD') AS date,
               COUNT(*)::INT AS count
        FROM leads l
        {where_clause(clauses)}
        GROUP BY 1
        ORDER BY 1
        """,
        tuple(params),
    )
    return [{"date": row["date"], "count": row["count"]} for row in cur.fetchall()]
