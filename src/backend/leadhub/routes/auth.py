from fastapi import APIRouter, Depends

from leadhub.db.postgres import get_db
from leadhub.deps import require
from leadhub.models.user import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserOut,
)
from leadhub.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_USER_FIELDS = {"id", "name", "email", "role", "status", "company_name"}


def _session_user(row: dict) -> dict:
    return UserOut.from_row(row).to_json(include=SESSION_USER_FIELDS)


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, cur=Depends(get_db)):
    result = auth_service.register(
        cur,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        company_name=payload.company_name,
        phone=payload.phone,
    )
    return {
        "success": True,
        "message": "Registration successful. Waiting for super admin approval.",
        "token": result["token"],
        "user": _session_user(result["user"]),
    }


@router.post("/login")
def login(payload: LoginRequest, cur=Depends(get_db)):
    result = auth_service.authenticate(cur, email=payload.email, password=payload.password)
    return {
        "success": True,
        "message": "Login successful",
        "token": result["token"],
        "user": _session_user(result["user"]),
    }


@router.get("/me")
def me(user: dict = Depends(require("profile:read"))):
    return {"success": True, "data": UserOut.from_row(user).to_json()}


@router.put("/updatedetails")
def update_details(
    payload: UpdateDetailsRequest,
    user: dict = Depends(require("profile:update")),
    cur=Depends(get_db),
):
    updated = auth_service.update_profile(
        cur,
        user,
        name=payload.name,
        company_name=payload.company_name,
        phone=payload.phone,
    )
    return {"success": True, "data": UserOut.from_row(updated).to_json()}


@router.put("/updatepassword")
def update_password(
    payload: UpdatePasswordRequest,
    user: dict = Depends(require("profile:update")),
    cur=Depends(get_db),
):
    result = auth_service.change_password(
        cur,
        user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {
        "success": True,
        "message": "Password updated successfully",
        "token": result["token"],
    }
