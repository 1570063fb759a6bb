from fastapi import APIRouter, Depends, Path

from leadhub.db.postgres import get_db
from leadhub.deps import lead_filters, page_query, require
from leadhub.models.common import LandingPageSummary
from leadhub.models.lead import LeadDetailsUpdate, LeadFilters, LeadOut, LeadStatusUpdate
from leadhub.models.user import UpdateDetailsRequest, UserOut
from leadhub.routes.leads import lead_export, lead_page
from leadhub.services import access as access_service
from leadhub.services import auth as auth_service
from leadhub.services import dashboard as dashboard_service
from leadhub.services import leads as lead_service
from leadhub.utils.pagination import PageParams

router = APIRouter(prefix="/sub-admin", tags=["sub-admin"])

SELF_SERVICE = "sub_admin:self_service"


@router.get("/profile")
def get_profile(user: dict = Depends(require(SELF_SERVICE))):
    return {"success": True, "data": UserOut.from_row(user).to_json()}


@router.put("/profile")
def update_profile(
    payload: UpdateDetailsRequest,
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    # company name is managed by the super admin
    updated = auth_service.update_profile(cur, user, name=payload.name, phone=payload.phone)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": UserOut.from_row(updated).to_json(),
    }


@router.get("/landing-page")
def assigned_landing_pages(
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    records = access_service.list_by_sub_admin(cur, user["id"], status="active")
    if not records:
        return {"success": True, "data": None, "message": "No landing pages assigned yet"}
    return {
        "success": True,
        "data": [LandingPageSummary.from_prefixed(row).to_json() for row in records],
    }


@router.get("/leads")
def list_leads(
    filters: LeadFilters = Depends(lead_filters),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    return lead_page(cur, user, filters, paging)


@router.get("/leads/export")
def export_leads(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    return lead_export(cur, user, filters)


@router.put("/leads/{lead_id}/status")
def update_lead_status(
    payload: LeadStatusUpdate,
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    lead = lead_service.update_lead_status(cur, user, lead_id, payload.status)
    return {
        "success": True,
        "message": "Lead status updated successfully",
        "data": LeadOut.from_row(lead).to_json(),
    }


@router.put("/leads/{lead_id}")
def update_lead(
    payload: LeadDetailsUpdate,
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    lead = lead_service.update_lead_details(cur, user, lead_id, payload.model_dump())
    return {
        "success": True,
        "message": "Lead updated successfully",
        "data": LeadOut.from_row(lead).to_json(),
    }


@router.get("/dashboard-stats")
def dashboard_stats(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require(SELF_SERVICE)),
    cur=Depends(get_db),
):
    return {"success": True, "data": dashboard_service.sub_admin_dashboard(cur, user, filters)}
