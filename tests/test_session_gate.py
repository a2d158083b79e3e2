from datetime import timedelta

import pytest

from core.config import settings
from models.account import Account, AccountRole, AccountStatus
from models.authentication import UserSession
from repositories.session import SessionRepository
from services.session_gate import (
    HOME_ROUTE,
    LOGIN_ROUTE,
    VERIFY_OTP_ROUTE,
    WAITING_ROOM_ROUTE,
    GateArea,
    SessionGate,
    evaluate_gate,
    landing_route,
)
from tests.conftest import make_account


def account(status, role=AccountRole.MEMBER):
    return Account(status=status, role=role)


@pytest.mark.parametrize(
    "status, expected",
    [
        (AccountStatus.UNVERIFIED, VERIFY_OTP_ROUTE),
        (AccountStatus.PENDING_APPROVAL, WAITING_ROOM_ROUTE),
        (AccountStatus.REJECTED, LOGIN_ROUTE),
    ],
)
def test_non_active_accounts_are_redirected(status, expected):
    decision = evaluate_gate(account(status), GateArea.MEMBER)
    assert not decision.allowed
    assert decision.redirect_to == expected
    assert decision.end_session == (status == AccountStatus.REJECTED)


def test_anonymous_goes_to_login():
    assert evaluate_gate(None, GateArea.MEMBER).redirect_to == LOGIN_ROUTE
    assert evaluate_gate(None, GateArea.ADMIN).redirect_to == LOGIN_ROUTE


def test_admin_area_needs_admin_role():
    member = account(AccountStatus.ACTIVE)
    admin = account(AccountStatus.ACTIVE, role=AccountRole.ADMIN)

    assert evaluate_gate(member, GateArea.MEMBER).allowed
    assert evaluate_gate(member, GateArea.ADMIN).redirect_to == HOME_ROUTE
    assert evaluate_gate(admin, GateArea.ADMIN).allowed


def test_pending_admin_is_not_let_into_admin_area():
    pending_admin = account(AccountStatus.PENDING_APPROVAL, role=AccountRole.ADMIN)
    assert evaluate_gate(pending_admin, GateArea.ADMIN).redirect_to == WAITING_ROOM_ROUTE


def test_landing_route():
    assert landing_route(account(AccountStatus.ACTIVE)) == HOME_ROUTE
    assert landing_route(account(AccountStatus.UNVERIFIED)) == VERIFY_OTP_ROUTE
    assert landing_route(None) == LOGIN_ROUTE


async def open_session(session_factory, account_id, clock, lifetime):
    async with session_factory() as db:
        session = await SessionRepository(db).create(
            account_id, expires_at=clock.now + lifetime, now=clock.now
        )
        await db.commit()
        return session.session_id


async def test_resolve_returns_account_for_live_session(session_factory, clock):
    member = await make_account(session_factory, "6281200000010")
    session_id = await open_session(
        session_factory, member.id, clock, timedelta(minutes=settings.SESSION_DURATION)
    )

    async with session_factory() as db:
        resolved = await SessionGate(db, clock).resolve(session_id)

    assert resolved.account.id == member.id
    assert resolved.refreshed_until is None


async def test_resolve_ignores_unknown_and_expired_sessions(session_factory, clock):
    member = await make_account(session_factory, "6281200000011")
    session_id = await open_session(session_factory, member.id, clock, timedelta(minutes=5))

    async with session_factory() as db:
        gate = SessionGate(db, clock)
        assert await gate.resolve(None) is None
        assert await gate.resolve("no-such-session") is None
        clock.advance(minutes=6)
        assert await gate.resolve(session_id) is None


async def test_session_close_to_expiry_is_extended(session_factory, clock):
    member = await make_account(session_factory, "6281200000012")
    session_id = await open_session(session_factory, member.id, clock, timedelta(days=1))

    async with session_factory() as db:
        resolved = await SessionGate(db, clock).resolve(session_id)

    expected = clock.now + timedelta(minutes=settings.SESSION_DURATION)
    assert resolved.refreshed_until == expected
    async with session_factory() as db:
        stored = await db.get(UserSession, session_id)
        assert stored.expires_at == expected


async def test_end_deactivates_the_session(session_factory, clock):
    member = await make_account(session_factory, "6281200000013", status=AccountStatus.REJECTED)
    session_id = await open_session(
        session_factory, member.id, clock, timedelta(minutes=settings.SESSION_DURATION)
    )

    async with session_factory() as db:
        await SessionGate(db, clock).end(session_id, reason="rejected")

    async with session_factory() as db:
        assert await SessionGate(db, clock).resolve(session_id) is None
