from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from leadhub.db.postgres import get_db
from leadhub.deps import page_query, require
from leadhub.models.access import (
    AccessRequestApprove,
    AccessRequestCreate,
    AccessRequestOut,
    AccessRequestReject,
)
from leadhub.models.common import RequestStatus
from leadhub.services import access as access_service
from leadhub.utils.pagination import PageParams, pagination

router = APIRouter(prefix="/access-requests", tags=["access-requests"])


@router.post("", status_code=201)
def create_access_request(
    payload: AccessRequestCreate,
    user: dict = Depends(require("access_requests:create")),
    cur=Depends(get_db),
):
    row = access_service.create_request(cur, user, payload.landing_page_id, payload.message)
    return {
        "success": True,
        "message": "Access request created successfully",
        "data": AccessRequestOut.from_row(row).to_json(),
    }


@router.get("")
def list_access_requests(
    status: Optional[RequestStatus] = Query(None),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("access_requests:decide")),
    cur=Depends(get_db),
):
    rows, total = access_service.list_requests(
        cur, status=status, limit=paging.limit, offset=paging.offset
    )
    return {
        "success": True,
        "count": len(rows),
        "pagination": pagination(paging, total),
        "total": total,
        "data": [AccessRequestOut.from_row(row).to_json() for row in rows],
    }


@router.get("/my-requests")
def my_access_requests(
    user: dict = Depends(require("access_requests:read_own")),
    cur=Depends(get_db),
):
    rows = access_service.list_my_requests(cur, user)
    return {
        "success": True,
        "count": len(rows),
        "data": [AccessRequestOut.from_row(row).to_json() for row in rows],
    }


@router.put("/{request_id}/approve")
def approve_access_request(
    payload: Optional[AccessRequestApprove] = None,
    request_id: int = Path(..., ge=1),
    user: dict = Depends(require("access_requests:decide")),
    cur=Depends(get_db),
):
    landing_page_id = payload.landing_page_id if payload else None
    row = access_service.approve_request(cur, user, request_id, landing_page_id)
    return {
        "success": True,
        "message": "Access request approved successfully",
        "data": AccessRequestOut.from_row(row).to_json(),
    }


@router.put("/{request_id}/reject")
def reject_access_request(
    payload: AccessRequestReject,
    request_id: int = Path(..., ge=1),
    user: dict = Depends(require("access_requests:decide")),
    cur=Depends(get_db),
):
    row = access_service.reject_request(cur, user, request_id, payload.reason)
    return {
        "success": True,
        "message": "Access request rejected successfully",
        "data": AccessRequestOut.from_row(row).to_json(),
    }


@router.delete("/{request_id}")
def delete_access_request(
    request_id: int = Path(..., ge=1),
    user: dict = Depends(require("access_requests:delete")),
    cur=Depends(get_db),
):
    access_service.delete_request(cur, user, request_id)
    return {"success": True, "message": "Access request deleted successfully"}
