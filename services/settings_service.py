from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import Forbidden
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from repositories.app_settings import AppSettingsRepository
from repositories.base import commit
from scripts.authentication_helpers import utcnow

logger = get_logger(__name__)

BRANDING_FIELDS = (
    "app_name",
    "app_description",
    "keywords",
    "theme_color",
    "logo_url",
    "icon_url",
    "apple_icon_url",
    "og_image_url",
)


class AppSettingsService:
    """Site branding shown on public pages; only admins may change it."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.repository = AppSettingsRepository(db)

    async def get(self) -> Dict[str, Optional[str]]:
        """Stored branding, with the configured app name until an admin sets one."""
        row = await self.repository.current()
        values = {field: getattr(row, field) if row is not None else None for field in BRANDING_FIELDS}
        values["app_name"] = values["app_name"] or settings.APP_NAME
        return values

    async def update(self, actor: Account, changes: Dict[str, Any]) -> Dict[str, Optional[str]]:
        if actor is None or actor.role != AccountRole.ADMIN or actor.status != AccountStatus.ACTIVE:
            raise Forbidden()

        # empty strings clear a field
        values = {field: (value or None) for field, value in changes.items() if field in BRANDING_FIELDS}
        if values:
            await self.repository.upsert(values, actor.id, self.clock())
            await commit(self.db, "update_app_settings")
            logger.info("App settings updated", actor_id=actor.id, fields=sorted(values))
        return await self.get()
