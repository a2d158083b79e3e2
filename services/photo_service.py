"""
Photo metadata and the trash lifecycle.

Files are stored by the data store; this service records them, lists them
and moves them between the gallery and the trash. Members only ever see and
delete their own photos. Restoring and purging from the trash is for admins.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import Forbidden, PhotoNotFound, ValidationFailed
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from models.photo import Photo
from repositories.base import commit
from repositories.photo import PhotoRepository
from scripts.authentication_helpers import utcnow

logger = get_logger(__name__)

MAX_BULK_DELETE = 100


@dataclass(frozen=True)
class PhotoPage:
    photos: List[Photo]
    total: int


@dataclass(frozen=True)
class UploadContext:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def device_type(user_agent: Optional[str]) -> str:
    agent = (user_agent or "").lower()
    if "mobile" in agent:
        return "Mobile"
    if "tablet" in agent:
        return "Tablet"
    return "Desktop"


def _is_admin(actor: Account) -> bool:
    return actor.role == AccountRole.ADMIN


def _require_active(actor: Optional[Account]) -> Account:
    if actor is None or actor.status != AccountStatus.ACTIVE:
        raise Forbidden()
    return actor


def _require_admin(actor: Optional[Account]) -> Account:
    if not _is_admin(_require_active(actor)):
        raise Forbidden()
    return actor


class PhotoService:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.photos = PhotoRepository(db)

    async def record_upload(
        self,
        owner: Account,
        storage_path: str,
        display_url: str,
        file_name: str,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None,
        exif_data: Optional[Dict[str, Any]] = None,
        context: Optional[UploadContext] = None,
    ) -> Photo:
        """Register a file the client already put into storage."""
        _require_active(owner)
        if not storage_path.startswith(f"{owner.id}/"):
            # storage paths are namespaced by owner
            raise ValidationFailed("Lokasi file tidak valid")

        context = context or UploadContext()
        now = self.clock()
        photo = await self.photos.create(
            owner.id,
            {
                "storage_path": storage_path,
                "display_url": display_url,
                "file_name": file_name,
                "file_size": file_size,
                "mime_type": mime_type,
                "exif_data": exif_data or {},
                "audit_metadata": {
                    "upload_ip": context.ip_address or "unknown",
                    "user_agent": context.user_agent or "unknown",
                    "device_type": device_type(context.user_agent),
                    "captured_at": now.isoformat(),
                },
            },
            now,
        )
        await commit(self.db, "record_photo")
        logger.info("Photo recorded", photo_id=photo.id, owner_id=owner.id, file_size=file_size)
        return photo

    async def list_photos(
        self,
        actor: Account,
        owner_id: Optional[int] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 24,
    ) -> PhotoPage:
        """Gallery listing; members are always limited to their own photos."""
        _require_active(actor)
        if not _is_admin(actor):
            owner_id = actor.id
        photos, total = await self.photos.search(owner_id=owner_id, search=search, skip=skip, limit=limit)
        return PhotoPage(photos=photos, total=total)

    async def list_trash(self, actor: Account, skip: int = 0, limit: int = 100) -> PhotoPage:
        _require_admin(actor)
        photos, total = await self.photos.search(deleted=True, skip=skip, limit=limit)
        return PhotoPage(photos=photos, total=total)

    async def soft_delete(self, actor: Account, photo_id: int) -> None:
        await self.bulk_soft_delete(actor, [photo_id])

    async def bulk_soft_delete(self, actor: Account, photo_ids: Sequence[int]) -> int:
        """Move photos to the trash; a member must own every one of them.

        Returns how many photos actually moved (already trashed ones are skipped).
        """
        _require_active(actor)
        ids = sorted(set(photo_ids))
        if not ids:
            raise ValidationFailed("Pilih minimal satu foto")
        if len(ids) > MAX_BULK_DELETE:
            raise ValidationFailed(f"Maksimal {MAX_BULK_DELETE} foto sekaligus")

        found = await self.photos.get_many(ids)
        if len(found) != len(ids):
            raise PhotoNotFound()
        if not _is_admin(actor) and any(photo.owner_id != actor.id for photo in found):
            raise Forbidden()

        moved = await self.photos.mark_deleted(ids, actor.id, self.clock())
        await commit(self.db, "soft_delete_photos")
        logger.info("Photos moved to trash", actor_id=actor.id, requested=len(ids), moved=moved)
        return moved

    async def restore(self, actor: Account, photo_id: int) -> Photo:
        _require_admin(actor)
        if not await self.photos.restore(photo_id):
            # missing, or not in the trash
            raise PhotoNotFound()
        await commit(self.db, "restore_photo")
        photo = await self.photos.get(photo_id)
        logger.info("Photo restored", photo_id=photo_id, actor_id=actor.id)
        return photo

    async def permanent_delete(self, actor: Account, photo_id: int) -> str:
        """Drop the metadata row and return its storage path for the data store to remove."""
        _require_admin(actor)
        photo = await self.photos.get(photo_id)
        if photo is None:
            raise PhotoNotFound()
        storage_path = photo.storage_path
        await self.photos.purge(photo_id)
        await commit(self.db, "purge_photo")
        logger.warning(
            "Photo permanently deleted", photo_id=photo_id, actor_id=actor.id, storage_path=storage_path
        )
        return storage_path
