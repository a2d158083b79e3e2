"""
One-time code issuance and verification.

A challenge is persisted (hashed) before the code is sent, so a WhatsApp
outage never loses or half-writes it. All challenge mutations go through the
conditional statements in ``OtpChallengeRepository``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import (
    AttemptsExceeded,
    CodeMismatch,
    Expired,
    InvalidTransition,
    MessagingDeliveryFailure,
    NoActiveChallenge,
    RateLimited,
)
from core.logging import get_logger
from models.account import Account, AccountStatus
from models.authentication import OtpPurpose
from repositories.base import commit
from repositories.otp import OtpChallengeRepository
from scripts.authentication_helpers import generate_otp, hash_otp, is_expired, otp_matches, utcnow
from services.account_state import AccountEvent, apply_transition
from services.phone import mask_phone
from services.whatsapp_service import (
    MessagingChannel,
    registration_otp_message,
    reset_password_otp_message,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedChallenge:
    account_id: int
    purpose: OtpPurpose
    expires_at: datetime
    delivered: bool


class OtpService:
    def __init__(
        self,
        db: AsyncSession,
        messaging: MessagingChannel,
        clock: Callable[[], datetime] = utcnow,
        code_generator: Callable[[], str] = generate_otp,
    ):
        self.db = db
        self.messaging = messaging
        self.clock = clock
        self.code_generator = code_generator
        self.challenges = OtpChallengeRepository(db)

    async def issue(self, account: Account, purpose: OtpPurpose, resend: bool = False) -> IssuedChallenge:
        """Replace the account's challenge with a fresh code and send it.

        Raises RateLimited inside the resend cooldown, PersistenceFailure if
        the challenge could not be stored, and MessagingDeliveryFailure when
        the code is stored but WhatsApp delivery failed.
        """
        account_id = account.id
        phone = account.phone_number
        now = self.clock()
        cooldown = timedelta(seconds=settings.OTP_RESEND_COOLDOWN_SECONDS)
        expires_at = now + timedelta(minutes=settings.OTP_TTL_MINUTES)
        code = self.code_generator()
        code_hash = hash_otp(code)

        replaced = await self.challenges.reissue(
            account_id, purpose, code_hash, expires_at, now, throttle_cutoff=now - cooldown
        )
        if not replaced:
            if await self.challenges.exists(account_id):
                logger.warning("OTP resend throttled", account_id=account_id, resend=resend)
                raise RateLimited(retry_after=settings.OTP_RESEND_COOLDOWN_SECONDS)
            if not await self.challenges.insert(account_id, purpose, code_hash, expires_at, now):
                raise RateLimited(retry_after=settings.OTP_RESEND_COOLDOWN_SECONDS)

        await commit(self.db, "issue_otp")
        logger.info(
            "OTP challenge issued",
            account_id=account_id,
            purpose=purpose.value,
            resend=resend,
            expires_at=expires_at.isoformat(),
        )

        if purpose == OtpPurpose.REGISTRATION:
            message = registration_otp_message(code, settings.OTP_TTL_MINUTES)
        else:
            message = reset_password_otp_message(code, settings.OTP_TTL_MINUTES)

        result = await self.messaging.send_text(phone, message)
        if not result.ok:
            logger.error(
                "OTP delivery failed; challenge kept",
                account_id=account_id,
                to=mask_phone(phone),
                detail=result.detail,
            )
            raise MessagingDeliveryFailure(detail=result.detail)

        return IssuedChallenge(account_id=account_id, purpose=purpose, expires_at=expires_at, delivered=True)

    async def check(self, account: Account, code: str, purpose: OtpPurpose) -> None:
        """Validate and consume the challenge without committing.

        Failure paths commit their own bookkeeping (attempt counter, retired
        challenge) before raising. On success the retirement is left pending
        so the caller can fold its own writes into the same transaction.
        """
        account_id = account.id
        challenge = await self.challenges.get_for_account(account_id)
        if challenge is None or challenge.consumed_at is not None or challenge.purpose != purpose:
            raise NoActiveChallenge()

        version = challenge.version
        now = self.clock()

        if is_expired(challenge.expires_at, now):
            await self.challenges.consume(account_id, version, now)
            await commit(self.db, "discard_expired_otp")
            logger.info("OTP challenge expired", account_id=account_id)
            raise Expired()

        if challenge.attempts >= settings.MAX_ATTEMPTS:
            await self.challenges.consume(account_id, version, now)
            await commit(self.db, "discard_exhausted_otp")
            logger.warning("OTP attempts exhausted", account_id=account_id)
            raise AttemptsExceeded()

        if not otp_matches(code, challenge.code_hash):
            attempts = challenge.attempts + 1
            recorded = await self.challenges.record_failure(account_id, version)
            await commit(self.db, "record_otp_failure")
            if not recorded:
                raise NoActiveChallenge()
            logger.info("OTP mismatch", account_id=account_id, attempts=attempts)
            raise CodeMismatch(attempts_remaining=max(settings.MAX_ATTEMPTS - attempts, 0))

        if not await self.challenges.consume(account_id, version, now):
            # superseded by a resend or a concurrent verify since the read
            await self.db.rollback()
            raise NoActiveChallenge()

    async def verify(self, account: Account, code: str, purpose: OtpPurpose = OtpPurpose.REGISTRATION) -> Optional[AccountStatus]:
        """Verify ``code``; for registration also advance the account status.

        Returns the account's new status for registration challenges.
        """
        await self.check(account, code, purpose)

        new_status = None
        if purpose == OtpPurpose.REGISTRATION:
            event = (
                AccountEvent.OTP_VERIFIED
                if settings.REQUIRE_ADMIN_APPROVAL
                else AccountEvent.OTP_VERIFIED_AUTO_APPROVED
            )
            try:
                new_status = await apply_transition(self.db, account, event, self.clock())
            except InvalidTransition:
                await self.db.rollback()
                raise

        await commit(self.db, "verify_otp")
        logger.info("OTP verified", account_id=account.id, purpose=purpose.value)
        return new_status
