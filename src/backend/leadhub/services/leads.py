"""Role-scoped lead queries, updates and reporting.

A super admin sees every lead. A sub-admin's queries are narrowed to the
landing pages of their active grants; with no grants the result is empty
and lead storage is never queried.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from leadhub import policy
from leadhub.config import settings
from leadhub.db import admin_access as access_db
from leadhub.db import leads as leads_db
from leadhub.errors import NotFound
from leadhub.models.common import LEAD_STATUSES, SUPER_ADMIN
from leadhub.models.lead import LeadFilters, LeadOut
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)

LEAD_FORBIDDEN = "Not authorized to access this lead"

EXPORT_COLUMNS = (
    ("First Name", "first_name"),
    ("Last Name", "last_name"),
    ("Email", "email"),
    ("Phone", "phone"),
    ("Company", "company"),
    ("Message", "message"),
    ("Landing Page", "landing_page_name"),
    ("Status", "status"),
    ("IP Address", "ip_address"),
)


def resolve_scope(cur, user: Dict[str, Any], filters: LeadFilters) -> LeadFilters:
    """Return ``filters`` narrowed to what ``user`` may see.

    A landing page filter outside a sub-admin's grants yields an empty
    ``landing_page_ids`` list, which matches nothing.
    """
    if user["role"] == SUPER_ADMIN:
        return filters
    allowed = access_db.active_landing_page_ids(cur, user["id"])
    if filters.landing_page_ids is None:
        scope = allowed
    else:
        scope = [lp_id for lp_id in filters.landing_page_ids if lp_id in allowed]
    return filters.model_copy(update={"landing_page_ids": scope})


def _is_empty(filters: LeadFilters) -> bool:
    return filters.landing_page_ids is not None and not filters.landing_page_ids


def list_leads(
    cur,
    user: Dict[str, Any],
    filters: LeadFilters,
    *,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    scoped = resolve_scope(cur, user, filters)
    if _is_empty(scoped):
        return [], 0
    return leads_db.list_leads(cur, scoped, limit=limit, offset=offset)


def get_lead(cur, user: Dict[str, Any], lead_id: int) -> Dict[str, Any]:
    lead = leads_db.get_lead(cur, lead_id)
    if not lead:
        raise NotFound("Lead not found")
    policy.ensure_landing_page_access(cur, user, lead["landing_page_id"], LEAD_FORBIDDEN)
    return lead


def update_lead_status(
    cur, user: Dict[str, Any], lead_id: int, status: str
) -> Dict[str, Any]:
    get_lead(cur, user, lead_id)
    updated = leads_db.update_lead(cur, lead_id, {"status": status})
    logger.info("Lead id=%s status set to %s by id=%s", lead_id, status, user["id"])
    return updated


def update_lead_details(
    cur, user: Dict[str, Any], lead_id: int, changes: Dict[str, Optional[str]]
) -> Dict[str, Any]:
    """Update the fixed contact attributes; ``dynamic_fields`` is not editable here."""
    updates = {key: value for key, value in changes.items() if value is not None}
    get_lead(cur, user, lead_id)
    return leads_db.update_lead(cur, lead_id, updates)


def delete_lead(cur, user: Dict[str, Any], lead_id: int) -> None:
    if not leads_db.delete_lead(cur, lead_id):
        raise NotFound("Lead not found")
    logger.info("Lead id=%s deleted by id=%s", lead_id, user["id"])


def summarize_statuses(counts: Dict[str, int]) -> Dict[str, int]:
    """``{"totalLeads": n, "newLeads": n, ...}`` from a status -> count map."""
    summary = {"totalLeads": sum(counts.values())}
    for status in LEAD_STATUSES:
        summary[f"{status}Leads"] = counts.get(status, 0)
    return summary


def stats_window_start() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=settings.stats_window_days)


def stats_overview(cur, user: Dict[str, Any], filters: LeadFilters) -> Dict[str, Any]:
    scoped = resolve_scope(cur, user, filters)
    if _is_empty(scoped):
        result: Dict[str, Any] = summarize_statuses({})
        result.update(leadsByDate=[], recentLeads=[])
        return result

    result = summarize_statuses(leads_db.count_by_status(cur, scoped))
    result["leadsByDate"] = leads_db.count_by_day(cur, scoped, stats_window_start())
    recent, _ = leads_db.list_leads(cur, scoped, limit=settings.recent_leads_limit)
    result["recentLeads"] = [LeadOut.from_row(row).to_json() for row in recent]
    return result


def export_row(lead: Dict[str, Any]) -> Dict[str, Any]:
    row: Dict[str, Any] = {label: lead.get(column) or "" for label, column in EXPORT_COLUMNS}
    created_at = lead.get("created_at")
    row["Created At"] = created_at.isoformat() if created_at else ""
    for key, value in (lead.get("dynamic_fields") or {}).items():
        if key in row:
            continue
        row[key] = ", ".join(value) if isinstance(value, list) else value
    return row


def export_leads(cur, user: Dict[str, Any], filters: LeadFilters) -> List[Dict[str, Any]]:
    rows, _ = list_leads(cur, user, filters)
    return [export_row(lead) for lead in rows]
