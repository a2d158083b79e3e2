import pytest

from core.exceptions import Forbidden, InvalidTransition
from models.account import Account, AccountRole, AccountStatus
from services.account_state import AccountEvent, apply_transition, authorize, next_status
from tests.conftest import make_account


def test_registration_verification_moves_to_pending_approval():
    assert next_status(AccountStatus.UNVERIFIED, AccountEvent.OTP_VERIFIED) == AccountStatus.PENDING_APPROVAL


def test_auto_approval_skips_the_waiting_room():
    assert (
        next_status(AccountStatus.UNVERIFIED, AccountEvent.OTP_VERIFIED_AUTO_APPROVED)
        == AccountStatus.ACTIVE
    )


def test_admin_decisions():
    assert next_status(AccountStatus.PENDING_APPROVAL, AccountEvent.APPROVE) == AccountStatus.ACTIVE
    assert next_status(AccountStatus.PENDING_APPROVAL, AccountEvent.REJECT) == AccountStatus.REJECTED


@pytest.mark.parametrize(
    "status, event",
    [
        (AccountStatus.UNVERIFIED, AccountEvent.APPROVE),
        (AccountStatus.ACTIVE, AccountEvent.REJECT),
        (AccountStatus.ACTIVE, AccountEvent.OTP_VERIFIED),
        (AccountStatus.REJECTED, AccountEvent.APPROVE),
        (AccountStatus.PENDING_APPROVAL, AccountEvent.OTP_VERIFIED),
    ],
)
def test_undefined_transitions_are_rejected(status, event):
    with pytest.raises(InvalidTransition):
        next_status(status, event)


def test_only_active_admins_may_moderate():
    member = Account(role=AccountRole.MEMBER, status=AccountStatus.ACTIVE)
    pending_admin = Account(role=AccountRole.ADMIN, status=AccountStatus.PENDING_APPROVAL)
    admin = Account(role=AccountRole.ADMIN, status=AccountStatus.ACTIVE)

    for actor in (None, member, pending_admin):
        with pytest.raises(Forbidden):
            authorize(actor, AccountEvent.APPROVE)
    authorize(admin, AccountEvent.REJECT)
    authorize(None, AccountEvent.OTP_VERIFIED)


async def test_apply_transition_is_conditional_on_the_read_status(session_factory, clock, admin):
    target = await make_account(
        session_factory, "6281200000002", status=AccountStatus.PENDING_APPROVAL
    )

    # a second admin still looking at the pending row
    stale = Account(id=target.id, role=AccountRole.MEMBER, status=AccountStatus.PENDING_APPROVAL)

    async with session_factory() as db:
        current = await db.get(Account, target.id)
        await apply_transition(db, current, AccountEvent.APPROVE, clock(), actor=admin)
        await db.commit()

    async with session_factory() as db:
        with pytest.raises(InvalidTransition):
            await apply_transition(db, stale, AccountEvent.REJECT, clock(), actor=admin)
        await db.rollback()

    async with session_factory() as check:
        stored = await check.get(Account, target.id)
        assert stored.status == AccountStatus.ACTIVE
        assert stored.status_changed_by_id == admin.id


class RecordingLogger:
    """Same calling convention as a structlog bound logger: the message is ``event``."""

    def __init__(self):
        self.entries = []

    def info(self, event, **kw):
        self.entries.append((event, kw))


async def test_apply_transition_logs_the_change(session_factory, clock, admin, monkeypatch):
    import services.account_state as account_state

    recorder = RecordingLogger()
    monkeypatch.setattr(account_state, "logger", recorder)
    target = await make_account(
        session_factory, "6281200000003", status=AccountStatus.PENDING_APPROVAL
    )

    async with session_factory() as db:
        current = await db.get(Account, target.id)
        new = await apply_transition(db, current, AccountEvent.APPROVE, clock(), actor=admin)
        await db.commit()

    assert new == AccountStatus.ACTIVE
    [(message, context)] = recorder.entries
    assert message == "Account status changed"
    assert context["transition"] == "approve"
    assert context["from_status"] == "pending_approval"
    assert context["to_status"] == "active"
    assert context["actor_id"] == admin.id
