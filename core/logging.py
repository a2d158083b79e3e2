"""
Logging configuration for Galeri Backend.

structlog sits on top of the stdlib logging tree: JSON lines in production,
coloured console output when DEBUG is on, plus optional daily log files.
"""

import logging
import os
import sys
import time
from datetime import datetime
import structlog
from structlog.stdlib import LoggerFactory

from core.config import settings

LOGS_DIR = "logs"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_SECRET_KEYS = {"otp", "code", "password", "new_password", "token"}
_PHONE_KEYS = {"phone", "phone_number", "to"}


def _redact(logger, method_name, event_dict):
    """Never let one-time codes or passwords reach a log line; mask raw phone numbers."""
    for key in _SECRET_KEYS & event_dict.keys():
        event_dict[key] = "[redacted]"
    for key in _PHONE_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and value.isdigit() and len(value) >= 8:
            event_dict[key] = f"{value[:6]}****{value[-4:]}"
    return event_dict


def _file_handler(prefix: str, level: int) -> logging.FileHandler:
    path = os.path.join(LOGS_DIR, f"{prefix}_{datetime.now().strftime('%Y%m%d')}.log")
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logging() -> structlog.stdlib.BoundLogger:
    """Configure structlog and the root logger from settings."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _redact,
            structlog.processors.JSONRenderer() if not settings.DEBUG else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(_FORMAT))
    root_logger.addHandler(console_handler)

    if settings.ENABLE_FILE_LOGGING or settings.ENABLE_REQUEST_LOGGING:
        os.makedirs(LOGS_DIR, exist_ok=True)

    if settings.ENABLE_FILE_LOGGING:
        root_logger.addHandler(_file_handler("app", logging.INFO))
        root_logger.addHandler(_file_handler("error", logging.ERROR))

    if settings.ENABLE_REQUEST_LOGGING:
        request_logger = logging.getLogger("requests")
        request_logger.setLevel(logging.INFO)
        # keep request lines out of app.log
        request_logger.propagate = False
        request_logger.addHandler(_file_handler("requests", logging.INFO))

    logger = structlog.get_logger()

    if settings.SENTRY_DSN and settings.SENTRY_DSN.strip():
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
            ],
            traces_sample_rate=0.1 if settings.ENV == "production" else 1.0,
        )

        logger.info("Sentry integration enabled", environment=settings.SENTRY_ENVIRONMENT)

    return logger


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


async def log_request_middleware(request, call_next):
    """Log each request with its status code and duration."""
    logger = get_logger("requests")
    started = time.perf_counter()

    response = await call_next(request)

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
        client_ip=request.client.host if request.client else None,
    )
    return response
