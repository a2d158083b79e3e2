import hashlib
import hmac
import secrets
from datetime import datetime, timezone

from core.config import settings


def utcnow() -> datetime:
    """Naive UTC now; every timestamp column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_otp(length: int = None) -> str:
    length = length or settings.OTP_LENGTH
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def hash_otp(otp: str) -> str:
    return hmac.new(settings.SECRET_KEY.encode(), otp.encode(), hashlib.sha256).hexdigest()


def otp_matches(submitted: str, otp_hash: str) -> bool:
    return hmac.compare_digest(hash_otp(submitted), otp_hash)


def is_expired(expires_at: datetime, now: datetime = None) -> bool:
    return (now or utcnow()) > expires_at


def is_valid_otp_format(otp: str) -> bool:
    return len(otp) == settings.OTP_LENGTH and otp.isascii() and otp.isdigit()
