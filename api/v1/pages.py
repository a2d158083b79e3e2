"""
Page routes.

These return small JSON documents describing the page; the gallery frontend
renders them. Gated pages redirect through the session gate, boundary pages
send an account that belongs elsewhere to its landing page.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from api.deps import current_account_optional, require_admin, require_member
from core.config import settings
from models.account import Account
from schemas.account import AccountRead
from services.session_gate import (
    LOGIN_ROUTE,
    VERIFY_OTP_ROUTE,
    WAITING_ROOM_ROUTE,
    landing_route,
)

router = APIRouter(include_in_schema=False)


def _boundary(page: str, account: Optional[Account], anonymous_allowed: bool = True):
    if account is None:
        if anonymous_allowed:
            return None
        return RedirectResponse(LOGIN_ROUTE, status_code=303)
    target = landing_route(account)
    if target != page:
        return RedirectResponse(target, status_code=303)
    return None


@router.get(LOGIN_ROUTE)
async def login_page(account: Optional[Account] = Depends(current_account_optional)):
    redirect = _boundary(LOGIN_ROUTE, account)
    if redirect is not None:
        return redirect
    return {"page": "login", "app": settings.APP_NAME}


@router.get(VERIFY_OTP_ROUTE)
async def verify_otp_page(account: Optional[Account] = Depends(current_account_optional)):
    redirect = _boundary(VERIFY_OTP_ROUTE, account)
    if redirect is not None:
        return redirect
    return {
        "page": "verify-otp",
        "phone_number": account.phone_number if account else None,
        "otp_length": settings.OTP_LENGTH,
    }


@router.get(WAITING_ROOM_ROUTE)
async def waiting_room_page(account: Optional[Account] = Depends(current_account_optional)):
    redirect = _boundary(WAITING_ROOM_ROUTE, account, anonymous_allowed=False)
    if redirect is not None:
        return redirect
    return {"page": "waiting-room", "full_name": account.full_name}


@router.get("/dashboard")
async def dashboard_page(account: Account = Depends(require_member)):
    return {"page": "dashboard", "account": AccountRead.model_validate(account)}


@router.get("/admin")
async def admin_page(account: Account = Depends(require_admin)):
    return {"page": "admin", "account": AccountRead.model_validate(account)}
