from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse

from leadhub.db.postgres import get_db
from leadhub.deps import page_query, require
from leadhub.models.access import AdminAccessOut, GrantAccessRequest, sub_admin_with_access
from leadhub.models.common import AccessStatus, UserStatus
from leadhub.models.user import CreateSubAdminRequest, RejectUserRequest, UserOut
from leadhub.services import access as access_service
from leadhub.services import auth as auth_service
from leadhub.services import sub_admins as sub_admin_service
from leadhub.utils.pagination import PageParams, pagination

router = APIRouter(prefix="/admin", tags=["admin"])


# --- account approval ----------------------------------------------------------------------

@router.get("/pending-requests")
def pending_requests(
    user: dict = Depends(require("users:approve")),
    cur=Depends(get_db),
):
    rows = auth_service.list_pending_users(cur)
    return {
        "success": True,
        "count": len(rows),
        "data": [UserOut.from_row(row).to_json() for row in rows],
    }


@router.put("/approve-user/{user_id}")
def approve_user(
    user_id: int = Path(..., ge=1),
    user: dict = Depends(require("users:approve")),
    cur=Depends(get_db),
):
    approved = auth_service.approve_user(cur, user, user_id)
    return {
        "success": True,
        "message": "User approved successfully",
        "data": UserOut.from_row(approved).to_json(),
    }


@router.put("/reject-user/{user_id}")
def reject_user(
    payload: Optional[RejectUserRequest] = None,
    user_id: int = Path(..., ge=1),
    user: dict = Depends(require("users:approve")),
    cur=Depends(get_db),
):
    reason = payload.reason if payload else None
    rejected = auth_service.reject_user(cur, user, user_id, reason)
    return {
        "success": True,
        "message": "User rejected successfully",
        "data": UserOut.from_row(rejected).to_json(),
    }


# --- sub-admins ----------------------------------------------------------------------------

@router.post("/create-sub-admin", status_code=201)
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
    return {
        "success": True,
        "message": "Sub admin created successfully",
        "data": UserOut.from_row(created).to_json(),
    }


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
        "total": total,
        "pagination": pagination(paging, total),
        "data": [sub_admin_with_access(row, access) for row, access in items],
    }


# --- access grants -------------------------------------------------------------------------

@router.post("/grant-access")
def grant_access(
    payload: GrantAccessRequest,
    user: dict = Depends(require("access:manage")),
    cur=Depends(get_db),
):
    record, created = access_service.grant_access(
        cur, user, payload.sub_admin_id, payload.landing_page_id
    )
    if created:
        status_code, message = 201, "Access granted successfully"
    else:
        status_code, message = 200, "Access reactivated successfully"
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "message": message,
            "data": AdminAccessOut.from_row(record).to_json(),
        },
    )


@router.put("/revoke-access/{access_id}")
def revoke_access(
    access_id: int = Path(..., ge=1),
    user: dict = Depends(require("access:manage")),
    cur=Depends(get_db),
):
    record = access_service.revoke_access(cur, user, access_id)
    return {
        "success": True,
        "message": "Access revoked successfully",
        "data": AdminAccessOut.from_row(record).to_json(),
    }


@router.get("/access-records")
def access_records(
    sub_admin: Optional[int] = Query(None, alias="subAdmin"),
    landing_page: Optional[int] = Query(None, alias="landingPage"),
    status: Optional[AccessStatus] = Query(None),
    user: dict = Depends(require("access:manage")),
    cur=Depends(get_db),
):
    if sub_admin is not None:
        rows = access_service.list_by_sub_admin(cur, sub_admin, status=status)
        if landing_page is not None:
            rows = [row for row in rows if row["landing_page_id"] == landing_page]
    elif landing_page is not None:
        rows = access_service.list_by_landing_page(cur, landing_page, status=status)
    else:
        rows = access_service.list_all(cur, status=status)
    return {
        "success": True,
        "count": len(rows),
        "data": [AdminAccessOut.from_row(row).to_json() for row in rows],
    }
