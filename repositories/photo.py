from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.photo import Photo
from repositories.base import BaseRepository


class PhotoRepository(BaseRepository[Photo]):
    def __init__(self, db: AsyncSession):
        super().__init__(Photo, db)

    async def create(self, owner_id: int, values: Dict[str, Any], now: datetime) -> Photo:
        photo = Photo(owner_id=owner_id, is_deleted=False, created_at=now, **values)
        self.db.add(photo)
        await self._flush("create_photo")
        return photo

    async def get_many(self, photo_ids: Sequence[int]) -> List[Photo]:
        result = await self._execute(select(Photo).where(Photo.id.in_(photo_ids)), "get_photos")
        return list(result.scalars().all())

    async def search(
        self,
        owner_id: Optional[int] = None,
        deleted: bool = False,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 24,
    ) -> Tuple[List[Photo], int]:
        """Newest first, plus the total row count before pagination.

        ``deleted`` picks the gallery (False) or the trash (True).
        """
        conditions = []
        if owner_id is not None:
            conditions.append(Photo.owner_id == owner_id)
        conditions.append(Photo.is_deleted.is_(deleted))
        if search:
            conditions.append(func.lower(Photo.file_name).contains(search.strip().lower(), autoescape=True))

        total = await self._execute(select(func.count(Photo.id)).where(*conditions), "count_photos")
        query = (
            select(Photo)
            .where(*conditions)
            .order_by(Photo.created_at.desc(), Photo.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._execute(query, "search_photos")
        return list(result.scalars().all()), total.scalar_one()

    async def mark_deleted(self, photo_ids: Sequence[int], actor_id: int, now: datetime) -> int:
        statement = (
            update(Photo)
            .where(Photo.id.in_(photo_ids), Photo.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=now, deleted_by_id=actor_id)
        )
        result = await self._execute(statement, "soft_delete_photos")
        return result.rowcount

    async def restore(self, photo_id: int) -> bool:
        statement = (
            update(Photo)
            .where(Photo.id == photo_id, Photo.is_deleted.is_(True))
            .values(is_deleted=False, deleted_at=None, deleted_by_id=None)
        )
        result = await self._execute(statement, "restore_photo")
        return result.rowcount == 1

    async def purge(self, photo_id: int) -> bool:
        result = await self._execute(delete(Photo).where(Photo.id == photo_id), "purge_photo")
        return result.rowcount == 1

    async def gallery_totals(self) -> Tuple[int, int]:
        """Number of photos outside the trash and their combined size in bytes."""
        query = select(func.count(Photo.id), func.coalesce(func.sum(Photo.file_size), 0)).where(
            Photo.is_deleted.is_(False)
        )
        result = await self._execute(query, "photo_totals")
        count, size = result.one()
        return count, int(size)
