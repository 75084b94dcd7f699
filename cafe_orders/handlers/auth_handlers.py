# cafe_orders/handlers/auth_handlers.py
import logging
from fastapi import APIRouter, Depends, Request
from ..config import Config
from ..models.user import (
    AdminLoginRequest,
    ChangePasswordRequest,
    SendOtpRequest,
    SessionUser,
    UpdateProfileRequest,
    VerifyOtpRequest
)
from ..services import AuthService
from .base_handler import get_auth_service, get_current_user, login_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session_payload(user: SessionUser) -> dict:
    return user.model_dump(mode="json", by_alias=True)


@router.post("/send-otp")
async def send_otp(body: SendOtpRequest, service: AuthService = Depends(get_auth_service)):
    otp = await service.send_otp(body.mobile)

    response = {"success": True, "message": "OTP sent successfully"}
    # no SMS gateway: outside production the code is handed back directly
    if not Config.is_production():
        logger.info(f"[DEMO] OTP for {body.mobile}: {otp}")
        response["otp"] = otp
    return response


@router.post("/verify-otp")
async def verify_otp(body: VerifyOtpRequest, request: Request,
                     service: AuthService = Depends(get_auth_service)):
    user, needs_profile_update = await service.verify_otp(body.mobile, body.otp)
    login_user(request, user)
    return {
        "success": True,
        "user": _session_payload(user),
        "needsProfileUpdate": needs_profile_update
    }


@router.post("/admin-login")
async def admin_login(body: AdminLoginRequest, request: Request,
                      service: AuthService = Depends(get_auth_service)):
    if not body.otp:
        otp = await service.request_admin_otp(body.mobile, body.password)
        response = {"success": True, "otpRequired": True}
        if not Config.is_production():
            logger.info(f"[ADMIN DEMO] OTP for admin {body.mobile}: {otp}")
            response["otp"] = otp
        return response

    user = await service.verify_admin_login(body.mobile, body.password, body.otp)
    login_user(request, user)
    return {"success": True, "user": _session_payload(user)}


@router.get("/me")
async def me(user: SessionUser = Depends(get_current_user)):
    return _session_payload(user)


@router.post("/update-profile")
async def update_profile(body: UpdateProfileRequest, request: Request,
                         user: SessionUser = Depends(get_current_user),
                         service: AuthService = Depends(get_auth_service)):
    updated = await service.update_profile(user, body)
    login_user(request, updated)
    return {"success": True, "user": _session_payload(updated)}


@router.post("/change-password")
async def change_password(body: ChangePasswordRequest,
                          user: SessionUser = Depends(get_current_user),
                          service: AuthService = Depends(get_auth_service)):
    await service.change_password(user, body.old_password, body.new_password)
    return {"success": True, "message": "Password changed successfully"}


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"success": True}
