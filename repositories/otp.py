from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.authentication import OtpChallenge, OtpPurpose
from repositories.base import BaseRepository


class OtpChallengeRepository(BaseRepository[OtpChallenge]):
    """Every write is a single conditional statement so concurrent
    resend/verify requests cannot leave a stale code usable."""

    def __init__(self, db: AsyncSession):
        super().__init__(OtpChallenge, db)

    async def get_for_account(self, account_id: int) -> Optional[OtpChallenge]:
        result = await self._execute(
            select(OtpChallenge)
            .where(OtpChallenge.account_id == account_id)
            .execution_options(populate_existing=True),
            "get_otp_challenge",
        )
        return result.scalar_one_or_none()

    async def reissue(
        self,
        account_id: int,
        purpose: OtpPurpose,
        code_hash: str,
        expires_at: datetime,
        now: datetime,
        throttle_cutoff: datetime,
    ) -> bool:
        """Overwrite the existing challenge if it was issued at or before ``throttle_cutoff``."""
        statement = (
            update(OtpChallenge)
            .where(
                OtpChallenge.account_id == account_id,
                OtpChallenge.issued_at <= throttle_cutoff,
            )
            .values(
                purpose=purpose,
                code_hash=code_hash,
                expires_at=expires_at,
                attempts=0,
                issued_at=now,
                version=OtpChallenge.version + 1,
                consumed_at=None,
            )
        )
        result = await self._execute(statement, "reissue_otp_challenge")
        return result.rowcount == 1

    async def insert(
        self,
        account_id: int,
        purpose: OtpPurpose,
        code_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Create the first challenge; False when another request got there first."""
        self.db.add(
            OtpChallenge(
                account_id=account_id,
                purpose=purpose,
                code_hash=code_hash,
                expires_at=expires_at,
                attempts=0,
                issued_at=now,
                version=1,
            )
        )
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True

    async def exists(self, account_id: int) -> bool:
        result = await self._execute(
            select(OtpChallenge.id).where(OtpChallenge.account_id == account_id), "otp_challenge_exists"
        )
        return result.scalar_one_or_none() is not None

    async def record_failure(self, account_id: int, version: int) -> bool:
        statement = (
            update(OtpChallenge)
            .where(
                OtpChallenge.account_id == account_id,
                OtpChallenge.version == version,
                OtpChallenge.consumed_at.is_(None),
            )
            .values(attempts=OtpChallenge.attempts + 1)
        )
        result = await self._execute(statement, "record_otp_failure")
        return result.rowcount == 1

    async def consume(self, account_id: int, version: int, now: datetime) -> bool:
        """Retire the challenge only if it is still the live one that was read.

        The row is kept so its ``issued_at`` still gates the next issuance.
        """
        statement = (
            update(OtpChallenge)
            .where(
                OtpChallenge.account_id == account_id,
                OtpChallenge.version == version,
                OtpChallenge.consumed_at.is_(None),
            )
            .values(consumed_at=now)
        )
        result = await self._execute(statement, "consume_otp_challenge")
        return result.rowcount == 1
