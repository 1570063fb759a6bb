from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Path, Request

from leadhub.db.postgres import get_db
from leadhub.deps import lead_filters, page_query, require
from leadhub.models.lead import LeadDetailsUpdate, LeadFilters, LeadOut, LeadStatusUpdate
from leadhub.services import ingestion
from leadhub.services import leads as lead_service
from leadhub.utils.pagination import PageParams, pagination

router = APIRouter(prefix="/leads", tags=["leads"])


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


def lead_page(cur, user: dict, filters: LeadFilters, paging: PageParams) -> Dict[str, Any]:
    """Paginated lead listing envelope shared by every lead list endpoint."""
    rows, total = lead_service.list_leads(
        cur, user, filters, limit=paging.limit, offset=paging.offset
    )
    return {
        "success": True,
        "count": len(rows),
        "pagination": pagination(paging, total),
        "total": total,
        "data": [LeadOut.from_row(row).to_json() for row in rows],
    }


def lead_export(cur, user: dict, filters: LeadFilters) -> Dict[str, Any]:
    rows = lead_service.export_leads(cur, user, filters)
    return {"success": True, "count": len(rows), "data": rows}


@router.post("", status_code=201)
def create_lead(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    cur=Depends(get_db),
):
    lead = ingestion.ingest_lead(
        cur,
        payload,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return {
        "success": True,
        "message": "Lead created successfully",
        "data": LeadOut.from_row(lead).to_json(),
    }


@router.get("")
def list_leads(
    filters: LeadFilters = Depends(lead_filters),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("leads:read")),
    cur=Depends(get_db),
):
    return lead_page(cur, user, filters, paging)


@router.get("/stats/overview")
def stats_overview(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require("leads:read")),
    cur=Depends(get_db),
):
    return {"success": True, "data": lead_service.stats_overview(cur, user, filters)}


@router.get("/export")
def export_leads(
    filters: LeadFilters = Depends(lead_filters),
    user: dict = Depends(require("leads:read")),
    cur=Depends(get_db),
):
    return lead_export(cur, user, filters)


@router.get("/{lead_id}")
def get_lead(
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require("leads:read")),
    cur=Depends(get_db),
):
    lead = lead_service.get_lead(cur, user, lead_id)
    return {"success": True, "data": LeadOut.from_row(lead).to_json()}


@router.put("/{lead_id}/status")
def update_lead_status(
    payload: LeadStatusUpdate,
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require("leads:update")),
    cur=Depends(get_db),
):
    lead = lead_service.update_lead_status(cur, user, lead_id, payload.status)
    return {
        "success": True,
        "message": "Lead status updated successfully",
        "data": LeadOut.from_row(lead).to_json(),
    }


@router.put("/{lead_id}")
def update_lead(
    payload: LeadDetailsUpdate,
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require("leads:update")),
    cur=Depends(get_db),
):
    lead = lead_service.update_lead_details(cur, user, lead_id, payload.model_dump())
    return {
        "success": True,
        "message": "Lead updated successfully",
        "data": LeadOut.from_row(lead).to_json(),
    }


@router.delete("/{lead_id}")
def delete_lead(
    lead_id: int = Path(..., ge=1),
    user: dict = Depends(require("leads:delete")),
    cur=Depends(get_db),
):
    lead_service.delete_lead(cur, user, lead_id)
    return {"success": True, "message": "Lead deleted successfully"}
