from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from api.deps import (
    clear_session_cookie,
    client_ip,
    current_account_optional,
    get_auth_service,
    set_session_cookie,
)
from core.config import settings
from models.account import Account, AccountStatus
from schemas.authentication import (
    LoginData,
    LoginRequest,
    OtpIssuedData,
    PhoneRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SessionStatusData,
    VerifyOtpRequest,
)
from schemas.responses import StandardSuccessResponse
from services.authentication_service import AuthenticationService
from services.session_gate import landing_route

router = APIRouter()


@router.post("/register", response_model=StandardSuccessResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    auth: AuthenticationService = Depends(get_auth_service),
):
    """Create an account and send the registration code over WhatsApp."""
    registration = await auth.register(
        body.full_name,
        body.phone,
        body.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )
    failure = registration.delivery_failure
    if failure is not None:
        # the account exists now; the session lets the member reach the resend screen
        failed = JSONResponse(
            status_code=failure.status_code,
            content={"success": False, "message": failure.message, "error": failure.code, "detail": failure.detail},
        )
        set_session_cookie(failed, registration.session.session_id)
        return failed

    set_session_cookie(response, registration.session.session_id)
    return {
        "success": True,
        "message": "Kode OTP telah dikirim ke WhatsApp Anda",
        "data": OtpIssuedData(expires_at=registration.expires_at),
    }


@router.post("/request-otp", response_model=StandardSuccessResponse)
async def request_otp(body: PhoneRequest, auth: AuthenticationService = Depends(get_auth_service)):
    """Resend a registration code or send a password reset code."""
    issued = await auth.request_otp(body.phone, body.purpose)
    return {
        "success": True,
        "message": "Kode OTP telah dikirim ke WhatsApp Anda",
        "data": OtpIssuedData(expires_at=issued.expires_at),
    }


@router.post("/verify-otp", response_model=StandardSuccessResponse)
async def verify_otp(body: VerifyOtpRequest, auth: AuthenticationService = Depends(get_auth_service)):
    account = await auth.verify_registration(body.phone, body.otp)
    return {
        "success": True,
        "message": "Nomor WhatsApp berhasil diverifikasi",
        "data": {"status": account.status.value, "next_route": landing_route(account)},
    }


@router.post("/login", response_model=StandardSuccessResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth: AuthenticationService = Depends(get_auth_service),
):
    result = await auth.login(
        body.identifier,
        body.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request),
    )
    set_session_cookie(response, result.session.session_id)
    return {
        "success": True,
        "message": f"Selamat datang, {result.account.full_name}!",
        "data": LoginData(
            account_id=result.account.id,
            next_route=result.next_route,
            needs_approval=result.account.status != AccountStatus.ACTIVE,
        ),
    }


@router.post("/reset-password", response_model=StandardSuccessResponse)
async def reset_password(body: ResetPasswordRequest, auth: AuthenticationService = Depends(get_auth_service)):
    await auth.reset_password(body.phone, body.otp, body.new_password)
    return {
        "success": True,
        "message": "Password berhasil direset! Silakan login dengan password baru.",
    }


@router.post("/logout", response_model=StandardSuccessResponse)
async def logout(
    request: Request,
    response: Response,
    auth: AuthenticationService = Depends(get_auth_service),
):
    await auth.logout(request.cookies.get(settings.SESSION_COOKIE_NAME))
    clear_session_cookie(response)
    return {"success": True, "message": "Anda telah keluar"}


@router.get("/session", response_model=StandardSuccessResponse)
async def session_status(
    account: Optional[Account] = Depends(current_account_optional),
    auth: AuthenticationService = Depends(get_auth_service),
):
    state = auth.session_status(account)
    current = state.account
    data = SessionStatusData(
        is_authenticated=state.is_authenticated,
        is_verified=state.is_verified,
        is_approved=state.is_approved,
        account_id=current.id if current else None,
        full_name=current.full_name if current else None,
        role=current.role.value if current else None,
        status=current.status.value if current else None,
    )
    return {"success": True, "message": "Session status", "data": data}
