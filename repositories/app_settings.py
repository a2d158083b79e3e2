from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.app_settings import AppSettings
from repositories.base import BaseRepository


class AppSettingsRepository(BaseRepository[AppSettings]):
    def __init__(self, db: AsyncSession):
        super().__init__(AppSettings, db)

    async def current(self) -> Optional[AppSettings]:
        result = await self._execute(
            select(AppSettings).order_by(AppSettings.id).limit(1), "get_app_settings"
        )
        return result.scalar_one_or_none()

    async def upsert(self, values: Dict[str, Any], actor_id: int, now: datetime) -> AppSettings:
        row = await self.current()
        if row is None:
            row = AppSettings()
            self.db.add(row)
        for field, value in values.items():
            setattr(row, field, value)
        row.updated_at = now
        row.updated_by_id = actor_id
        await self._flush("upsert_app_settings")
        return row
