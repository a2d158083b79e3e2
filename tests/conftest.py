import os

# Configure the app for tests before anything imports core.config
os.environ.setdefault("ENV", "test")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENABLE_FILE_LOGGING"] = "false"
os.environ["ENABLE_REQUEST_LOGGING"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("FONNTE_TOKEN", None)
os.environ.pop("SENTRY_DSN", None)

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from core.database import Base, get_db
from core.security import get_password_hash
from models.account import Account, AccountRole, AccountStatus
from repositories.account import AccountRepository
from services.whatsapp_service import DeliveryResult


class FakeMessagingChannel:
    """Records outgoing WhatsApp texts instead of calling Fonnte."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []
        self.fail_with: Optional[str] = None

    async def send_text(self, phone: str, message: str) -> DeliveryResult:
        if self.fail_with:
            return DeliveryResult(ok=False, detail=self.fail_with)
        self.sent.append((phone, message))
        return DeliveryResult(ok=True)

    def messages_to(self, phone: str) -> List[str]:
        return [message for to, message in self.sent if to == phone]


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class SequenceCodes:
    """Hands out predetermined OTP codes, then falls back to a fixed one."""

    def __init__(self, *codes: str):
        self.codes = list(codes)

    def __call__(self, length=None) -> str:
        return self.codes.pop(0) if self.codes else "000000"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def messaging():
    return FakeMessagingChannel()


@pytest.fixture
def clock():
    return MutableClock(datetime(2026, 3, 1, 8, 0, 0))


async def make_account(
    session_factory,
    phone: str,
    full_name: str = "Anggota Galeri",
    password: str = "rahasia123",
    role: AccountRole = AccountRole.MEMBER,
    status: AccountStatus = AccountStatus.ACTIVE,
    now: Optional[datetime] = None,
) -> Account:
    async with session_factory() as session:
        account = await AccountRepository(session).create(
            phone_number=phone,
            full_name=full_name,
            password_hash=get_password_hash(password),
            now=now or datetime(2026, 3, 1, 7, 0, 0),
            role=role,
            status=status,
        )
        await session.commit()
        return account


@pytest.fixture
async def admin(session_factory):
    return await make_account(
        session_factory, "6281200000001", full_name="Admin Galeri", role=AccountRole.ADMIN
    )


@pytest.fixture
async def client(session_factory, messaging, clock):
    from api.deps import get_clock, get_messaging_channel
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_messaging_channel] = lambda: messaging
    app.dependency_overrides[get_clock] = lambda: clock

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()
