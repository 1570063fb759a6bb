from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from leadhub.db.postgres import get_db
from leadhub.deps import page_query, require
from leadhub.models.common import LandingPageStatus
from leadhub.models.landing_page import (
    FormFieldsUpdate,
    FormTestRequest,
    LandingPageCreate,
    LandingPageOut,
    LandingPageUpdate,
)
from leadhub.services import landing_pages as landing_page_service
from leadhub.utils.pagination import PageParams, pagination

router = APIRouter(prefix="/landing-pages", tags=["landing-pages"])


@router.post("", status_code=201)
def create_landing_page(
    payload: LandingPageCreate,
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    row = landing_page_service.create_landing_page(
        cur,
        user,
        name=payload.name,
        url=payload.url,
        description=payload.description,
        status=payload.status,
        form_fields=payload.form_fields,
        include_default_fields=payload.include_default_fields,
    )
    return {
        "success": True,
        "message": "Landing page created successfully",
        "data": LandingPageOut.from_row(row).to_json(),
    }


@router.get("")
def list_landing_pages(
    status: Optional[LandingPageStatus] = Query(None),
    search: Optional[str] = Query(None),
    paging: PageParams = Depends(page_query),
    user: dict = Depends(require("landing_pages:read")),
    cur=Depends(get_db),
):
    rows, total = landing_page_service.list_landing_pages(
        cur, status=status, search=search, limit=paging.limit, offset=paging.offset
    )
    return {
        "success": True,
        "count": len(rows),
        "pagination": pagination(paging, total),
        "total": total,
        "data": [LandingPageOut.from_row(row).to_json() for row in rows],
    }


@router.get("/{landing_page_id}")
def get_landing_page(
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:read")),
    cur=Depends(get_db),
):
    row = landing_page_service.get_landing_page(cur, landing_page_id)
    return {"success": True, "data": LandingPageOut.from_row(row).to_json()}


@router.put("/{landing_page_id}")
def update_landing_page(
    payload: LandingPageUpdate,
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    changes = payload.model_dump(include=payload.model_fields_set)
    row = landing_page_service.update_landing_page(cur, landing_page_id, changes)
    return {
        "success": True,
        "message": "Landing page updated successfully",
        "data": LandingPageOut.from_row(row).to_json(),
    }


@router.delete("/{landing_page_id}")
def delete_landing_page(
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    landing_page_service.delete_landing_page(cur, landing_page_id)
    return {"success": True, "message": "Landing page deleted successfully"}


@router.get("/{landing_page_id}/stats")
def landing_page_stats(
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:read")),
    cur=Depends(get_db),
):
    stats = landing_page_service.landing_page_stats(cur, user, landing_page_id)
    return {"success": True, "data": stats}


@router.put("/{landing_page_id}/form-fields")
def update_form_fields(
    payload: FormFieldsUpdate,
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:write")),
    cur=Depends(get_db),
):
    row = landing_page_service.update_form_fields(
        cur, landing_page_id, payload.form_fields, payload.include_default_fields
    )
    return {
        "success": True,
        "message": "Landing page form fields updated successfully",
        "data": LandingPageOut.from_row(row).to_json(),
    }


@router.get("/{landing_page_id}/form-config")
def form_config(
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:read")),
    cur=Depends(get_db),
):
    config = landing_page_service.form_config(cur, landing_page_id)
    return {"success": True, "data": config.to_json()}


@router.post("/{landing_page_id}/test-form")
def test_form(
    payload: FormTestRequest,
    landing_page_id: int = Path(..., ge=1),
    user: dict = Depends(require("landing_pages:test_form")),
    cur=Depends(get_db),
):
    result = landing_page_service.validate_submission(cur, landing_page_id, payload.form_data)
    return {"success": True, "message": "Form validation passed", "data": result}
