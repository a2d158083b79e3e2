from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import generate_session_token
from models.authentication import UserSession
from repositories.base import BaseRepository


class SessionRepository(BaseRepository[UserSession]):
    def __init__(self, db: AsyncSession):
        super().__init__(UserSession, db)

    async def create(
        self,
        account_id: int,
        expires_at: datetime,
        now: datetime,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> UserSession:
        session = UserSession(
            session_id=generate_session_token(),
            account_id=account_id,
            created_at=now,
            expires_at=expires_at,
            user_agent=(user_agent or "")[:255] or None,
            ip_address=ip_address,
            is_active=True,
        )
        self.db.add(session)
        await self._flush("create_session")
        return session

    async def get_active(self, session_id: str, now: datetime) -> Optional[UserSession]:
        query = select(UserSession).where(
            UserSession.session_id == session_id,
            UserSession.is_active.is_(True),
            UserSession.expires_at > now,
        )
        result = await self._execute(query, "get_active_session")
        return result.scalar_one_or_none()

    async def extend(self, session_id: str, expires_at: datetime) -> None:
        await self._execute(
            update(UserSession).where(UserSession.session_id == session_id).values(expires_at=expires_at),
            "extend_session",
        )

    async def invalidate(self, session_id: str) -> None:
        await self._execute(
            update(UserSession).where(UserSession.session_id == session_id).values(is_active=False),
            "invalidate_session",
        )

    async def invalidate_all(self, account_id: int) -> int:
        result = await self._execute(
            update(UserSession)
            .where(UserSession.account_id == account_id, UserSession.is_active.is_(True))
            .values(is_active=False),
            "invalidate_all_sessions",
        )
        return result.rowcount
