"""
Account moderation for admins.

Each operation re-checks the acting account itself, so the service is safe to
call from places other than the admin router.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccountNotFound, Forbidden
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from repositories.account import AccountRepository
from repositories.base import commit
from repositories.photo import PhotoRepository
from scripts.authentication_helpers import utcnow
from services.account_state import AccountEvent, apply_transition
from services.phone import mask_phone, validate_phone
from services.whatsapp_service import DeliveryResult, MessagingChannel, approval_message

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccountStatistics:
    total_accounts: int
    by_status: Dict[str, int]
    pending_approvals: int
    admins: int
    total_photos: int = 0
    total_storage_bytes: int = 0


def _require_admin(actor: Optional[Account]) -> Account:
    if actor is None or actor.role != AccountRole.ADMIN or actor.status != AccountStatus.ACTIVE:
        raise Forbidden()
    return actor


class AdminService:
    def __init__(
        self,
        db: AsyncSession,
        messaging: MessagingChannel,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.messaging = messaging
        self.clock = clock
        self.accounts = AccountRepository(db)
        self.photos = PhotoRepository(db)

    async def list_accounts(
        self,
        actor: Account,
        status: Optional[AccountStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Account]:
        _require_admin(actor)
        return await self.accounts.list_accounts(status=status, skip=skip, limit=limit)

    async def pending_approvals(self, actor: Account) -> List[Account]:
        return await self.list_accounts(actor, status=AccountStatus.PENDING_APPROVAL)

    async def _target(self, account_id: int) -> Account:
        target = await self.accounts.get(account_id)
        if target is None:
            raise AccountNotFound("Akun tidak ditemukan.")
        return target

    async def approve(self, actor: Account, account_id: int) -> Account:
        """Activate a pending account and notify the member on WhatsApp.

        The notification is best effort: a delivery failure is logged and the
        approval stands.
        """
        _require_admin(actor)
        target = await self._target(account_id)
        await apply_transition(self.db, target, AccountEvent.APPROVE, self.clock(), actor=actor)
        await commit(self.db, "approve_account")

        result = await self.messaging.send_text(target.phone_number, approval_message(target.full_name))
        if not result.ok:
            logger.warning(
                "Approval notification not delivered",
                account_id=target.id,
                to=mask_phone(target.phone_number),
                detail=result.detail,
            )
        return target

    async def reject(self, actor: Account, account_id: int) -> Account:
        _require_admin(actor)
        target = await self._target(account_id)
        await apply_transition(self.db, target, AccountEvent.REJECT, self.clock(), actor=actor)
        await commit(self.db, "reject_account")
        return target

    async def change_role(self, actor: Account, account_id: int, role: AccountRole) -> Account:
        _require_admin(actor)
        if actor.id == account_id:
            raise Forbidden()
        target = await self._target(account_id)
        if target.role == role:
            return target

        previous = target.role
        await self.accounts.update_fields(target.id, {"role": role}, self.clock())
        await commit(self.db, "change_role")
        logger.info(
            "Account role changed",
            account_id=target.id,
            from_role=previous.value,
            to_role=role.value,
            actor_id=actor.id,
        )
        return target

    async def statistics(self, actor: Account) -> AccountStatistics:
        _require_admin(actor)
        counts = await self.accounts.count_by_status()
        total_photos, total_storage = await self.photos.gallery_totals()
        return AccountStatistics(
            total_accounts=sum(counts.values()),
            by_status={status.value: total for status, total in counts.items()},
            pending_approvals=counts[AccountStatus.PENDING_APPROVAL],
            admins=await self.accounts.count_admins(),
            total_photos=total_photos,
            total_storage_bytes=total_storage,
        )

    async def send_test_message(self, actor: Account, phone: str, message: str) -> DeliveryResult:
        """Connectivity check for the WhatsApp gateway."""
        _require_admin(actor)
        canonical = validate_phone(phone)
        result = await self.messaging.send_text(canonical, message)
        logger.info("Test message sent", actor_id=actor.id, to=mask_phone(canonical), ok=result.ok)
        return result
