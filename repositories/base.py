"""
Base repository: shared session handling and error translation.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Base
from core.exceptions import PersistenceFailure
from core.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Repositories never commit; the calling service owns the transaction."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def _execute(self, statement, operation: str):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Database error", operation=operation, error=str(e))
            raise PersistenceFailure(detail=operation) from e

    async def _flush(self, operation: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Flush failed", operation=operation, error=str(e))
            raise PersistenceFailure(detail=operation) from e

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get a single record by ID."""
        result = await self._execute(
            select(self.model).where(self.model.id == id), f"get_{self.model.__tablename__}"
        )
        return result.scalar_one_or_none()


async def commit(db: AsyncSession, operation: str) -> None:
    """Commit the unit of work, translating driver errors."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Commit failed", operation=operation, error=str(e))
        raise PersistenceFailure(detail=operation) from e
