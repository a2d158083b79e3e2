from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import ValidationFailed
from core.logging import get_logger
from models.account import Account
from repositories.account import AccountRepository
from repositories.base import commit
from scripts.authentication_helpers import utcnow

logger = get_logger(__name__)


class ProfileService:
    """Owner-only edits of display name, avatar and free-form attributes."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.accounts = AccountRepository(db)

    async def update(
        self,
        owner: Account,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Account:
        values: Dict[str, Any] = {}
        if full_name is not None:
            name = full_name.strip()
            if len(name) < settings.NAME_MIN_LENGTH:
                raise ValidationFailed(f"Nama lengkap minimal {settings.NAME_MIN_LENGTH} karakter")
            values["full_name"] = name
        if avatar_url is not None:
            values["avatar_url"] = avatar_url or None
        if attributes is not None:
            merged = dict(owner.profile_attributes or {})
            for key, value in attributes.items():
                # null removes the key
                if value is None:
                    merged.pop(key, None)
                else:
                    merged[key] = value
            values["profile_attributes"] = merged

        if not values:
            return owner

        await self.accounts.update_fields(owner.id, values, self.clock())
        await commit(self.db, "update_profile")
        await self.db.refresh(owner)
        logger.info("Profile updated", account_id=owner.id, fields=sorted(values))
        return owner
