"""
Per-request route gating.

``evaluate_gate`` is a pure function of the resolved account and the area
being requested; ``SessionGate`` resolves the account from a session cookie
and applies the sliding refresh policy.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from models.authentication import UserSession
from repositories.account import AccountRepository
from repositories.base import commit
from repositories.session import SessionRepository
from scripts.authentication_helpers import utcnow

logger = get_logger(__name__)

LOGIN_ROUTE = "/login"
VERIFY_OTP_ROUTE = "/verify-otp"
WAITING_ROOM_ROUTE = "/waiting-room"
HOME_ROUTE = "/dashboard"


class GateArea(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    end_session: bool = False


_STATUS_REDIRECTS = {
    AccountStatus.UNVERIFIED: GateDecision(False, VERIFY_OTP_ROUTE),
    AccountStatus.PENDING_APPROVAL: GateDecision(False, WAITING_ROOM_ROUTE),
    AccountStatus.REJECTED: GateDecision(False, LOGIN_ROUTE, end_session=True),
}


def evaluate_gate(account: Optional[Account], area: GateArea) -> GateDecision:
    if account is None:
        return GateDecision(False, LOGIN_ROUTE)

    status = AccountStatus(account.status)
    if status in _STATUS_REDIRECTS:
        return _STATUS_REDIRECTS[status]
    if status != AccountStatus.ACTIVE:
        raise ValueError(f"unhandled account status {status!r}")

    if area == GateArea.ADMIN and account.role != AccountRole.ADMIN:
        return GateDecision(False, HOME_ROUTE)
    return GateDecision(True)


def landing_route(account: Optional[Account]) -> str:
    """Where an account should be sent after login or from a boundary page."""
    decision = evaluate_gate(account, GateArea.MEMBER)
    return decision.redirect_to or HOME_ROUTE


@dataclass
class ResolvedSession:
    session: UserSession
    account: Account
    refreshed_until: Optional[datetime] = None


class SessionGate:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.sessions = SessionRepository(db)
        self.accounts = AccountRepository(db)

    async def resolve(self, session_id: Optional[str]) -> Optional[ResolvedSession]:
        """Load the live session and its account, extending it when it is close to expiry."""
        if not session_id:
            return None
        now = self.clock()
        session = await self.sessions.get_active(session_id, now)
        if session is None:
            return None
        account = await self.accounts.get(session.account_id)
        if account is None:
            return None

        resolved = ResolvedSession(session=session, account=account)
        if session.expires_at - now < timedelta(minutes=settings.SESSION_REFRESH_THRESHOLD_MINUTES):
            new_expiry = now + timedelta(minutes=settings.SESSION_DURATION)
            await self.sessions.extend(session_id, new_expiry)
            await commit(self.db, "refresh_session")
            resolved.refreshed_until = new_expiry
        return resolved

    async def end(self, session_id: str, reason: str) -> None:
        await self.sessions.invalidate(session_id)
        await commit(self.db, "end_session")
        logger.info("Session ended by gate", reason=reason)
