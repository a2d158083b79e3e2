"""
Registration, login, password reset and logout.

Every flow works on canonical phone numbers and delegates code handling to
``OtpService``; sessions are server-side rows referenced by an opaque cookie.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import (
    AccountNotFound,
    InvalidCredentials,
    InvalidPhoneFormat,
    MessagingDeliveryFailure,
    NoActiveChallenge,
    ValidationFailed,
)
from core.logging import get_logger
from core.security import get_password_hash, verify_password
from models.account import Account, AccountStatus
from models.authentication import OtpPurpose, UserSession
from repositories.account import AccountRepository
from repositories.base import commit
from repositories.session import SessionRepository
from scripts.authentication_helpers import is_valid_otp_format, utcnow
from services.otp_service import IssuedChallenge, OtpService
from services.phone import looks_like_phone, mask_phone, normalize_phone, validate_phone
from services.session_gate import HOME_ROUTE, GateArea, evaluate_gate
from services.whatsapp_service import MessagingChannel

logger = get_logger(__name__)

_DUMMY_PASSWORD_HASH = get_password_hash("galeri-unknown-account")


@dataclass(frozen=True)
class Registration:
    account: Account
    session: UserSession
    expires_at: Optional[datetime]
    # set when the code was stored but WhatsApp delivery failed
    delivery_failure: Optional[MessagingDeliveryFailure] = None


@dataclass(frozen=True)
class LoginResult:
    account: Account
    session: UserSession
    next_route: str


@dataclass(frozen=True)
class SessionStatus:
    is_authenticated: bool
    is_verified: bool = False
    is_approved: bool = False
    account: Optional[Account] = None


def _validate_name(full_name: str) -> str:
    name = (full_name or "").strip()
    if len(name) < settings.NAME_MIN_LENGTH:
        raise ValidationFailed(f"Nama lengkap minimal {settings.NAME_MIN_LENGTH} karakter")
    return name


def _validate_password(password: str) -> None:
    if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationFailed(f"Password minimal {settings.PASSWORD_MIN_LENGTH} karakter")


def _validate_otp(code: str) -> None:
    if not is_valid_otp_format(code or ""):
        raise ValidationFailed(f"Kode OTP harus {settings.OTP_LENGTH} digit angka")


class AuthenticationService:
    def __init__(
        self,
        db: AsyncSession,
        messaging: MessagingChannel,
        clock: Callable[[], datetime] = utcnow,
        otp_service: Optional[OtpService] = None,
    ):
        self.db = db
        self.clock = clock
        self.accounts = AccountRepository(db)
        self.sessions = SessionRepository(db)
        self.otp = otp_service or OtpService(db, messaging, clock=clock)

    async def register(
        self,
        full_name: str,
        phone: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Registration:
        """Create an unverified member, send the registration code, open a session.

        The account, challenge and session are committed before delivery is
        attempted. A failed delivery leaves all three in place and is returned
        on the Registration so the caller can still hand out the session and
        the member can ask for a resend.
        """
        name = _validate_name(full_name)
        canonical = validate_phone(phone)
        _validate_password(password)

        now = self.clock()
        account = await self.accounts.create(
            phone_number=canonical,
            full_name=name,
            password_hash=get_password_hash(password),
            now=now,
        )
        session = await self.sessions.create(
            account.id,
            expires_at=now + timedelta(minutes=settings.SESSION_DURATION),
            now=now,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        logger.info("Account registered", account_id=account.id, phone=mask_phone(canonical))

        try:
            issued = await self.otp.issue(account, OtpPurpose.REGISTRATION)
        except MessagingDeliveryFailure as exc:
            return Registration(account=account, session=session, expires_at=None, delivery_failure=exc)
        return Registration(account=account, session=session, expires_at=issued.expires_at)

    async def request_otp(self, phone: str, purpose: OtpPurpose) -> IssuedChallenge:
        """Resend a registration code or start a password reset."""
        account = await self.accounts.get_by_phone(validate_phone(phone))
        if account is None:
            raise AccountNotFound()

        if purpose == OtpPurpose.REGISTRATION and account.status != AccountStatus.UNVERIFIED:
            raise ValidationFailed("Nomor ini sudah terverifikasi. Silakan login.")
        if purpose == OtpPurpose.RESET_PASSWORD and account.status == AccountStatus.REJECTED:
            raise AccountNotFound()

        return await self.otp.issue(account, purpose, resend=True)

    async def verify_registration(self, phone: str, code: str) -> Account:
        _validate_otp(code)
        account = await self.accounts.get_by_phone(validate_phone(phone))
        if account is None:
            raise NoActiveChallenge()
        await self.otp.verify(account, code, OtpPurpose.REGISTRATION)
        return account

    async def login(
        self,
        identifier: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> LoginResult:
        """Log in with a phone number or a (unique) display name plus password."""
        if not identifier or not password:
            raise ValidationFailed("Nomor/Nama dan password harus diisi")

        account = await self._find_for_login(identifier)
        # unknown identifiers still pay for a hash check
        password_hash = account.password_hash if account is not None else _DUMMY_PASSWORD_HASH
        if not verify_password(password, password_hash) or account is None:
            logger.info("Login failed", identifier_is_phone=looks_like_phone(identifier))
            raise InvalidCredentials()
        if account.status == AccountStatus.REJECTED:
            logger.info("Login refused for rejected account", account_id=account.id)
            raise InvalidCredentials()

        now = self.clock()
        await self.accounts.update_fields(account.id, {"last_login_at": now}, now)
        session = await self.sessions.create(
            account.id,
            expires_at=now + timedelta(minutes=settings.SESSION_DURATION),
            now=now,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        await commit(self.db, "login")

        decision = evaluate_gate(account, GateArea.MEMBER)
        logger.info("Login succeeded", account_id=account.id, status=account.status.value)
        return LoginResult(account=account, session=session, next_route=decision.redirect_to or HOME_ROUTE)

    async def _find_for_login(self, identifier: str) -> Optional[Account]:
        if looks_like_phone(identifier):
            try:
                phone = normalize_phone(identifier)
            except InvalidPhoneFormat:
                return None
            return await self.accounts.get_by_phone(phone)
        matches = await self.accounts.find_by_name(identifier)
        # ambiguous names cannot identify an account
        return matches[0] if len(matches) == 1 else None

    async def reset_password(self, phone: str, code: str, new_password: str) -> Account:
        """Replace the password after a reset code check; ends every session."""
        _validate_otp(code)
        _validate_password(new_password)
        account = await self.accounts.get_by_phone(validate_phone(phone))
        if account is None:
            raise NoActiveChallenge()

        await self.otp.check(account, code, OtpPurpose.RESET_PASSWORD)
        now = self.clock()
        await self.accounts.update_fields(account.id, {"password_hash": get_password_hash(new_password)}, now)
        closed = await self.sessions.invalidate_all(account.id)
        await commit(self.db, "reset_password")
        logger.info("Password reset", account_id=account.id, sessions_closed=closed)
        return account

    def session_status(self, account: Optional[Account]) -> SessionStatus:
        if account is None:
            return SessionStatus(is_authenticated=False)
        return SessionStatus(
            is_authenticated=True,
            is_verified=account.status != AccountStatus.UNVERIFIED,
            is_approved=account.status == AccountStatus.ACTIVE,
            account=account,
        )

    async def logout(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        await self.sessions.invalidate(session_id)
        await commit(self.db, "logout")
