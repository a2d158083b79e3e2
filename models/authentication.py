from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func

from core.database import Base


class OtpPurpose(str, PyEnum):
    REGISTRATION = "registration"
    RESET_PASSWORD = "reset_password"


class OtpChallenge(Base):
    """The single outstanding one-time code of an account."""

    __tablename__ = "otp_challenges"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), unique=True, nullable=False)
    purpose = Column(
        SQLEnum(OtpPurpose, name="otp_purpose", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    code_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    issued_at = Column(DateTime, nullable=False)
    # bumped on every re-issue; verification writes are conditional on it
    version = Column(Integer, nullable=False, default=1)
    # set once the code is used up, expired or exhausted; the row stays so
    # issued_at keeps throttling resends
    consumed_at = Column(DateTime, nullable=True)


class UserSession(Base):
    __tablename__ = "user_sessions"

    session_id = Column(String(64), primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    user_agent = Column(String(255), nullable=True)
    ip_address = Column(String(64), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
