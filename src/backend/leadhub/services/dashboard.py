from typing import Any, Dict

from leadhub.db import access_requests as requests_db
from leadhub.db import admin_access as access_db
from leadhub.db import landing_pages as landing_pages_db
from leadhub.db import leads as leads_db
from leadhub.db import users as users_db
from leadhub.models.access import AccessRequestOut
from leadhub.models.common import REQUEST_STATUSES, SUB_ADMIN
from leadhub.models.lead import LeadFilters, LeadOut
from leadhub.models.user import UserOut
from leadhub.services.leads import stats_window_start, summarize_statuses

RECENT_ACTIVITY_LIMIT = 5
SUB_ADMIN_RECENT_LEADS_LIMIT = 10


def super_admin_dashboard(cur, filters: LeadFilters) -> Dict[str, Any]:
    """Platform-wide counts; the date range narrows leads and new sub-admins."""
    _, total_landing_pages = landing_pages_db.list_landing_pages(cur, limit=0)
    _, total_sub_admins = users_db.list_users(cur, role=SUB_ADMIN, limit=0)
    leads_by_status = leads_db.count_by_status(cur, filters)
    requests_by_status = requests_db.count_by_status(cur)

    overview: Dict[str, Any] = {
        "totalLandingPages": total_landing_pages,
        "totalSubAdmins": total_sub_admins,
        "totalLeads": sum(leads_by_status.values()),
    }
    for status in REQUEST_STATUSES:
        overview[f"{status}AccessRequests"] = requests_by_status.get(status, 0)

    recent_leads, _ = leads_db.list_leads(cur, filters, limit=RECENT_ACTIVITY_LIMIT)
    recent_requests, _ = requests_db.list_access_requests(cur, limit=RECENT_ACTIVITY_LIMIT)
    recent_sub_admins, _ = users_db.list_users(
        cur,
        role=SUB_ADMIN,
        since=filters.start_date,
        until=filters.end_date,
        limit=RECENT_ACTIVITY_LIMIT,
    )
    return {
        "overview": overview,
        "leadsByStatus": leads_by_status,
        "leadsByDate": leads_db.count_by_day(cur, filters, stats_window_start()),
        "recentActivity": {
            "leads": [LeadOut.from_row(row).to_json() for row in recent_leads],
            "accessRequests": [AccessRequestOut.from_row(row).to_json() for row in recent_requests],
            "subAdmins": [UserOut.from_row(row).to_json() for row in recent_sub_admins],
        },
    }


def sub_admin_dashboard(cur, user: Dict[str, Any], filters: LeadFilters) -> Dict[str, Any]:
    landing_page_ids = access_db.active_landing_page_ids(cur, user["id"])
    if not landing_page_ids:
        overview: Dict[str, Any] = {"totalLandingPages": 0}
        overview.update(summarize_statuses({}))
        return {"overview": overview, "leadsByDate": [], "recentLeads": []}

    scoped = filters.model_copy(update={"landing_page_ids": landing_page_ids})
    overview = {"totalLandingPages": len(landing_page_ids)}
    overview.update(summarize_statuses(leads_db.count_by_status(cur, scoped)))
    recent, _ = leads_db.list_leads(cur, scoped, limit=SUB_ADMIN_RECENT_LEADS_LIMIT)
    return {
        "overview": overview,
        "leadsByDate": leads_db.count_by_day(cur, scoped, stats_window_start()),
        "recentLeads": [LeadOut.from_row(row).to_json() for row in recent],
    }
