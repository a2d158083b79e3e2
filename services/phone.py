"""
Phone number canonicalisation.

Accounts are keyed by the digits-only international form that Fonnte expects
(e.g. ``6285157300793``), so every entry point runs user input through here.
"""

import re

from core.config import settings
from core.exceptions import InvalidPhoneFormat

_NON_DIGITS = re.compile(r"\D")
_SUBSCRIBER_DIGITS = (9, 13)


def normalize_phone(raw: str, country_code: str = None) -> str:
    """Return the canonical digits-only form of ``raw``.

    Raises InvalidPhoneFormat when ``raw`` has no digits at all.
    """
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        raise InvalidPhoneFormat()

    if digits.startswith("00"):
        digits = digits[2:]
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    if not digits.startswith(country_code):
        digits = country_code + digits
    # trunk zero kept after the country code, e.g. +62 0851...
    if digits.startswith(country_code + "0"):
        digits = country_code + digits[len(country_code) + 1:]
    return digits


def validate_phone(raw: str, country_code: str = None) -> str:
    """Normalise and check the subscriber part has a plausible length."""
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    phone = normalize_phone(raw, country_code)
    subscriber = len(phone) - len(country_code)
    low, high = _SUBSCRIBER_DIGITS
    if not low <= subscriber <= high:
        raise InvalidPhoneFormat()
    return phone


def looks_like_phone(identifier: str, country_code: str = None) -> bool:
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    value = identifier.strip()
    return value.startswith(("+", "0", country_code))


def mask_phone(phone: str) -> str:
    if len(phone) < 8:
        return phone
    return f"{phone[:6]}****{phone[-4:]}"
