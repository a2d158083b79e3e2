"""
Dependency injection utilities for API endpoints.

Database sessions, the WhatsApp channel, the clock and the session gate are
all provided here so tests can override any of them.
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from core.exceptions import GateRedirect
from models.account import Account
from scripts.authentication_helpers import utcnow
from services.admin_service import AdminService
from services.authentication_service import AuthenticationService
from services.photo_service import PhotoService
from services.profile_service import ProfileService
from services.session_gate import GateArea, ResolvedSession, SessionGate, evaluate_gate
from services.settings_service import AppSettingsService
from services.whatsapp_service import FonnteWhatsAppClient, MessagingChannel


def get_messaging_channel() -> MessagingChannel:
    return FonnteWhatsAppClient.from_settings()


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    messaging: MessagingChannel = Depends(get_messaging_channel),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AuthenticationService:
    return AuthenticationService(db, messaging, clock=clock)


def get_admin_service(
    db: AsyncSession = Depends(get_db),
    messaging: MessagingChannel = Depends(get_messaging_channel),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AdminService:
    return AdminService(db, messaging, clock=clock)


def get_profile_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ProfileService:
    return ProfileService(db, clock=clock)


def get_photo_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> PhotoService:
    return PhotoService(db, clock=clock)


def get_settings_service(
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AppSettingsService:
    return AppSettingsService(db, clock=clock)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_DURATION * 60,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


async def get_resolved_session(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Optional[ResolvedSession]:
    """Session and account behind the request cookie, or None."""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    resolved = await SessionGate(db, clock).resolve(session_id)
    if resolved is not None and resolved.refreshed_until is not None:
        set_session_cookie(response, resolved.session.session_id)
    return resolved


async def _enforce(
    area: GateArea,
    resolved: Optional[ResolvedSession],
    db: AsyncSession,
    clock: Callable[[], datetime],
) -> Account:
    account = resolved.account if resolved is not None else None
    decision = evaluate_gate(account, area)
    if decision.allowed:
        return account
    if decision.end_session and resolved is not None:
        await SessionGate(db, clock).end(resolved.session.session_id, reason=account.status.value)
    raise GateRedirect(decision.redirect_to, clear_session=resolved is None or decision.end_session)


async def require_member(
    resolved: Optional[ResolvedSession] = Depends(get_resolved_session),
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Account:
    """Active account of any role."""
    return await _enforce(GateArea.MEMBER, resolved, db, clock)


async def require_admin(
    resolved: Optional[ResolvedSession] = Depends(get_resolved_session),
    db: AsyncSession = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> Account:
    """Active account with the admin role."""
    return await _enforce(GateArea.ADMIN, resolved, db, clock)


async def current_account_optional(
    resolved: Optional[ResolvedSession] = Depends(get_resolved_session),
) -> Optional[Account]:
    return resolved.account if resolved is not None else None
