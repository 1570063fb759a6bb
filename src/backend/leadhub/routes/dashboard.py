from fastapi import APIRouter, Depends

from leadhub.db.postgres import get_db
from leadhub.deps import lead_filters, require
from leadhub.models.lead import LeadFilters
from leadhub.services import dashboard as dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/super-admin")
def super_admin_dashboard(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require("dashboard:super_admin")),
    cur=Depends(get_db),
):
    return {"success": True, "data": dashboard_service.super_admin_dashboard(cur, filters)}


@router.get("/sub-admin")
def sub_admin_dashboard(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require("dashboard:sub_admin")),
    cur=Depends(get_db),
):
    return {"success": True, "data": dashboard_service.sub_admin_dashboard(cur, user, filters)}
