"""
SQLAlchemy ORM models for Galeri Backend.
"""

from .account import Account, AccountRole, AccountStatus
from .app_settings import AppSettings
from .authentication import OtpChallenge, OtpPurpose, UserSession
from .photo import Photo

__all__ = [
    "Account",
    "AccountRole",
    "AccountStatus",
    "AppSettings",
    "OtpChallenge",
    "OtpPurpose",
    "Photo",
    "UserSession",
]
