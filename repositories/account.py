from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AccountExists, PersistenceFailure
from core.logging import get_logger
from models.account import Account, AccountRole, AccountStatus
from repositories.base import BaseRepository

logger = get_logger(__name__)


class AccountRepository(BaseRepository[Account]):
    def __init__(self, db: AsyncSession):
        super().__init__(Account, db)

    async def create(
        self,
        phone_number: str,
        full_name: str,
        password_hash: str,
        now: datetime,
        role: AccountRole = AccountRole.MEMBER,
        status: AccountStatus = AccountStatus.UNVERIFIED,
    ) -> Account:
        account = Account(
            phone_number=phone_number,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            status=status,
            profile_attributes={},
            status_changed_at=now,
            created_at=now,
            updated_at=now,
        )
        self.db.add(account)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AccountExists() from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Database error in create", error=str(e))
            raise PersistenceFailure(detail="create_account") from e
        return account

    async def get_by_phone(self, phone_number: str) -> Optional[Account]:
        result = await self._execute(
            select(Account).where(Account.phone_number == phone_number), "get_by_phone"
        )
        return result.scalar_one_or_none()

    async def find_by_name(self, full_name: str) -> List[Account]:
        """Case-insensitive exact match on display name."""
        query = select(Account).where(func.lower(Account.full_name) == full_name.strip().lower())
        result = await self._execute(query, "find_by_name")
        return list(result.scalars().all())

    async def list_accounts(
        self,
        status: Optional[AccountStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Account]:
        query = select(Account)
        if status is not None:
            query = query.where(Account.status == status)
        query = query.order_by(Account.created_at.desc(), Account.id.desc()).offset(skip).limit(limit)
        result = await self._execute(query, "list_accounts")
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[AccountStatus, int]:
        query = select(Account.status, func.count(Account.id)).group_by(Account.status)
        result = await self._execute(query, "count_by_status")
        counts = {status: 0 for status in AccountStatus}
        for status, total in result.all():
            counts[AccountStatus(status)] = total
        return counts

    async def count_admins(self) -> int:
        query = select(func.count(Account.id)).where(Account.role == AccountRole.ADMIN)
        result = await self._execute(query, "count_admins")
        return result.scalar_one()

    async def compare_and_set_status(
        self,
        account_id: int,
        expected: AccountStatus,
        new: AccountStatus,
        now: datetime,
        actor_id: Optional[int] = None,
    ) -> bool:
        """Move ``account_id`` from ``expected`` to ``new``; False if it was not in ``expected``."""
        statement = (
            update(Account)
            .where(Account.id == account_id, Account.status == expected)
            .values(status=new, status_changed_at=now, status_changed_by_id=actor_id, updated_at=now)
        )
        result = await self._execute(statement, "compare_and_set_status")
        return result.rowcount == 1

    async def update_fields(self, account_id: int, values: Dict[str, Any], now: datetime) -> bool:
        statement = update(Account).where(Account.id == account_id).values(**values, updated_at=now)
        result = await self._execute(statement, "update_fields")
        return result.rowcount == 1
