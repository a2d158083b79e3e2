"""
Account lifecycle.

    unverified --otp_verified--------------> pending_approval --approve--> active
        |                                           |
        +--otp_verified_auto_approved--> active      +--reject--> rejected

``active`` and ``rejected`` have no outgoing transitions. Password resets are
a separate flow and never touch status.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import Forbidden, InvalidTransition
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from repositories.account import AccountRepository

logger = get_logger(__name__)


class AccountEvent(str, Enum):
    OTP_VERIFIED = "otp_verified"
    OTP_VERIFIED_AUTO_APPROVED = "otp_verified_auto_approved"
    APPROVE = "approve"
    REJECT = "reject"


TRANSITIONS: Dict[Tuple[AccountStatus, AccountEvent], AccountStatus] = {
    (AccountStatus.UNVERIFIED, AccountEvent.OTP_VERIFIED): AccountStatus.PENDING_APPROVAL,
    (AccountStatus.UNVERIFIED, AccountEvent.OTP_VERIFIED_AUTO_APPROVED): AccountStatus.ACTIVE,
    (AccountStatus.PENDING_APPROVAL, AccountEvent.APPROVE): AccountStatus.ACTIVE,
    (AccountStatus.PENDING_APPROVAL, AccountEvent.REJECT): AccountStatus.REJECTED,
}

ADMIN_EVENTS: FrozenSet[AccountEvent] = frozenset({AccountEvent.APPROVE, AccountEvent.REJECT})


def next_status(current: AccountStatus, event: AccountEvent) -> AccountStatus:
    try:
        return TRANSITIONS[(AccountStatus(current), AccountEvent(event))]
    except KeyError:
        raise InvalidTransition(detail=f"{current.value} --{event.value}-->") from None


def authorize(actor: Optional[Account], event: AccountEvent) -> None:
    """Admin-only events need an active admin; raise Forbidden otherwise."""
    if event not in ADMIN_EVENTS:
        return
    if actor is None or actor.role != AccountRole.ADMIN or actor.status != AccountStatus.ACTIVE:
        raise Forbidden()


async def apply_transition(
    db: AsyncSession,
    target: Account,
    event: AccountEvent,
    now: datetime,
    actor: Optional[Account] = None,
) -> AccountStatus:
    """Authorize, compute and persist one transition without committing.

    The write is conditional on ``target`` still holding the status that was
    read, so two admins racing on the same account cannot both win.
    """
    authorize(actor, event)
    current = AccountStatus(target.status)
    new = next_status(current, event)

    changed = await AccountRepository(db).compare_and_set_status(
        target.id, current, new, now, actor_id=actor.id if actor is not None else None
    )
    if not changed:
        raise InvalidTransition(detail="status changed concurrently")

    logger.info(
        "Account status changed",
        account_id=target.id,
        transition=event.value,
        from_status=current.value,
        to_status=new.value,
        actor_id=actor.id if actor is not None else None,
    )
    return new
