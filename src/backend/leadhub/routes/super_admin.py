from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query

from leadhub.db.postgres import get_db
from leadhub.deps import lead_filters, page_query, require
from leadhub.models.access import sub_admin_with_access
from leadhub.models.common import LandingPageStatus, UserStatus
from leadhub.models.landing_page import LandingPageCreate, LandingPageUpdate
from leadhub.models.lead import LeadFilters
from leadhub.models.user import CreateSubAdminRequest, UpdateSubAdminRequest
from leadhub.routes import landing_pages as landing_page_routes
from leadhub.routes.leads import lead_export, lead_page
from leadhub.services import access as access_service
from leadhub.services import sub_admins as sub_admin_service
from leadhub.utils.pagination import PageParams, pagination

router = APIRouter(prefix="/super-admin", tags=["super-admin"])


def _assignment(payload: UpdateSubAdminRequest) -> Any:
    """Landing page assignment carried by an update, or ``UNSET``."""
    if "landing_page_id" not in payload.model_fields_set:
        return sub_admin_service.UNSET
    return payload.landing_page_id


# --- landing pages -------------------------------------------------------------------------
# Same behaviour as /api/landing-pages, restricted to super admins.

@router.get("/landing-pages")
def list_landing_pages(
    status: Optional[LandingPageStatus] = Query(None),
    search: Optional[str] = Query(None),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    return landing_page_routes.list_landing_pages(
        status=status, search=search, paging=paging, user=user, cur=cur
    )


@router.post("/landing-pages", status_code=201)
def create_landing_page(
    payload: LandingPageCreate,
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    return landing_page_routes.create_landing_page(payload=payload, user=user, cur=cur)


@router.put("/landing-pages/{landing_page_id}")
def update_landing_page(
    payload: LandingPageUpdate,
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    return landing_page_routes.update_landing_page(
        payload=payload, landing_page_id=landing_page_id, user=user, cur=cur
    )


@router.delete("/landing-pages/{landing_page_id}")
def delete_landing_page(
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    return landing_page_routes.delete_landing_page(
        landing_page_id=landing_page_id, user=user, cur=cur
    )


# --- sub-admins ----------------------------------------------------------------------------

@router.get("/sub-admins")
def list_sub_admins(
    status: Optional[UserStatus] = Query(None),
    search: Optional[str] = Query(None),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("sub_admins:manage")),
    cur=Depends(get_db),
):
    items, total = sub_admin_service.list_sub_admins(
        cur, status=status, search=search, limit=paging.limit, offset=paging.offset
    )
    return {
        "success": True,
        "count": len(items),
        "pagination": pagination(paging, total),
        "total": total,
        "data": [sub_admin_with_access(row, access) for row, access in items],
    }


@router.get("/sub-admins/{user_id}")
def get_sub_admin(
    user_id: int = Path(..., ge=1),
    user: dict = Depends(require("sub_admins:manage")),
    cur=Depends(get_db),
):
    row = sub_admin_service.get_sub_admin(cur, user_id)
    access = access_service.list_by_sub_admin(cur, user_id, status="active")
    return {"success": True, "data": sub_admin_with_access(row, access)}


@router.post("/sub-admins", status_code=201)
def create_sub_admin(
    payload: CreateSubAdminRequest,
    user: dict = Depends(require("sub_admins:manage")),
    cur=Depends(get_db),
):
    created = sub_admin_service.create_sub_admin(
        cur,
        user,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        company_name=payload.company_name,
        phone=payload.phone,
        status=payload.status,
        landing_page_id=payload.landing_page_id,
    )
    access = access_service.list_by_sub_admin(cur, created["id"], status="active")
    return {
        "success": True,
        "message": "Sub admin created successfully",
        "data": sub_admin_with_access(created, access),
    }


@router.put("/sub-admins/{user_id}")
def update_sub_admin(
    payload: UpdateSubAdminRequest,
    user_id: int = Path(..., ge=1),
    user: dict = Depends(require("sub_admins:manage")),
    cur=Depends(get_db),
):
    updated = sub_admin_service.update_sub_admin(
        cur,
        user,
        user_id,
        name=payload.name,
        company_name=payload.company_name,
        phone=payload.phone,
        status=payload.status,
        landing_page_id=_assignment(payload),
    )
    access = access_service.list_by_sub_admin(cur, user_id, status="active")
    return {
        "success": True,
        "message": "Sub admin updated successfully",
        "data": sub_admin_with_access(updated, access),
    }


@router.delete("/sub-admins/{user_id}")
def delete_sub_admin(
    user_id: int = Path(..., ge=1),
    user: dict = Depends(require("sub_admins:manage")),
    cur=Depends(get_db),
):
    sub_admin_service.delete_sub_admin(cur, user, user_id)
    return {"success": True, "message": "Sub admin deleted successfully"}


# --- leads ---------------------------------------------------------------------------------

@router.get("/leads")
def list_leads(
    filters: LeadFilters = Depends(lead_filters),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("leads:read_all")),
    cur=Depends(get_db),
):
    return lead_page(cur, user, filters, paging)


@router.get("/leads/export")
def export_leads(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require("leads:read_all")),
    cur=Depends(get_db),
):
    return lead_export(cur, user, filters)
