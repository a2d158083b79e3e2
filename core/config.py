"""
Configuration settings for Galeri Backend.

Uses Pydantic Settings for environment variable management.
"""

import os
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Logging Control
    ENABLE_FILE_LOGGING: bool = Field(default=True)
    ENABLE_REQUEST_LOGGING: bool = Field(default=True)

    # Application
    APP_NAME: str = Field(default="Galeri Backend")
    VERSION: str = Field(default="1.0.0")

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    origins: List[str] = [
        "http://localhost:3000",  # frontend URL
        "http://localhost:5173",
    ]

    DATABASE_URL: Optional[str] = Field(default="sqlite+aiosqlite:///./galeri.db")
    PRODUCTION_DATABASE_URL: Optional[str] = Field(default=None)

    @property
    def database_url(self) -> str:
        if self.ENV == "development":
            return self.DATABASE_URL or ""
        return self.PRODUCTION_DATABASE_URL or self.DATABASE_URL or ""

    DATABASE_POOL_SIZE: int = Field(default=10)
    DATABASE_MAX_OVERFLOW: int = Field(default=20)

    # Security
    SECRET_KEY: str = Field(default="secret-key")

    # OTP
    OTP_LENGTH: int = 6
    OTP_TTL_MINUTES: int = 5
    MAX_ATTEMPTS: int = 5
    OTP_RESEND_COOLDOWN_SECONDS: int = 60
    REQUIRE_ADMIN_APPROVAL: bool = True

    # Sessions (minutes)
    SESSION_DURATION: int = 60 * 24 * 30  # 30 days
    SESSION_REFRESH_THRESHOLD_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = Field(default="session_id")
    SESSION_COOKIE_SECURE: bool = Field(default=False)

    # Registration rules
    DEFAULT_COUNTRY_CODE: str = Field(default="62")
    PASSWORD_MIN_LENGTH: int = 6
    NAME_MIN_LENGTH: int = 3

    # WhatsApp Configuration (Fonnte)
    FONNTE_TOKEN: Optional[str] = Field(default=None)
    FONNTE_API_URL: str = Field(default="https://api.fonnte.com/send")
    FONNTE_TIMEOUT_SECONDS: float = Field(default=10.0)

    # Sentry (Optional)
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_ENVIRONMENT: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Create settings instance
settings = Settings()


def get_env_file() -> str:
    """Get the appropriate environment file based on ENV setting."""
    env_file = f".env.{settings.ENV}"
    if os.path.exists(env_file):
        return env_file
    return ".env"


# Update settings with environment-specific file
settings = Settings(_env_file=get_env_file())
