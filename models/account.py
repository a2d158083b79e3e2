"""
Account model for registration, verification and moderation.
"""

from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func

from core.database import Base


class AccountRole(str, PyEnum):
    MEMBER = "member"
    ADMIN = "admin"


class AccountStatus(str, PyEnum):
    UNVERIFIED = "unverified"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE = "active"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Account(Base):
    """A gallery member or admin, keyed by canonical phone number."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String(20), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(AccountRole, name="account_role", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=AccountRole.MEMBER,
    )
    status = Column(
        SQLEnum(AccountStatus, name="account_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=AccountStatus.UNVERIFIED,
        index=True,
    )

    # Profile
    avatar_url = Column(String(500), nullable=True)
    profile_attributes = Column(JSON, nullable=False, default=dict)

    # Bookkeeping
    status_changed_at = Column(DateTime, nullable=True)
    status_changed_by_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def __repr__(self) -> str:
        return f"<Account id={self.id} role={self.role.value if self.role else None} status={self.status.value if self.status else None}>"
