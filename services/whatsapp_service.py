"""
WhatsApp messaging through the Fonnte HTTP API.

The rest of the application depends only on ``MessagingChannel``: one call
that sends a text to a canonical phone number and reports whether it went out.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from core.config import settings
from core.logging import get_logger
from services.phone import mask_phone

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    detail: Optional[str] = None


class MessagingChannel(Protocol):
    async def send_text(self, phone: str, message: str) -> DeliveryResult:
        ...


class FonnteWhatsAppClient:
    """WhatsApp sender backed by https://api.fonnte.com/send."""

    def __init__(
        self,
        token: Optional[str],
        api_url: str = "https://api.fonnte.com/send",
        country_code: str = "62",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.api_url = api_url
        self.country_code = country_code
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "FonnteWhatsAppClient":
        return cls(
            token=settings.FONNTE_TOKEN,
            api_url=settings.FONNTE_API_URL,
            country_code=settings.DEFAULT_COUNTRY_CODE,
            timeout=settings.FONNTE_TIMEOUT_SECONDS,
        )

    async def send_text(self, phone: str, message: str) -> DeliveryResult:
        """
        Send a plain WhatsApp text.

        Args:
            phone: Canonical digits-only phone number (e.g. 6285157300793)
            message: Message body

        Returns:
            DeliveryResult: ok=True when Fonnte accepted the message
        """
        masked = mask_phone(phone)
        if not self.token:
            logger.error("FONNTE_TOKEN is not configured", to=masked)
            return DeliveryResult(ok=False, detail="messaging not configured")

        payload = {
            "target": phone,
            "message": message,
            "countryCode": self.country_code,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": self.token},
                    json=payload,
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Fonnte API error", to=masked, status_code=e.response.status_code, body=e.response.text[:200])
            return DeliveryResult(ok=False, detail=f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error("Error sending WhatsApp message", to=masked, error=str(e))
            return DeliveryResult(ok=False, detail=type(e).__name__)
        except ValueError:
            logger.error("Fonnte returned a non-JSON body", to=masked)
            return DeliveryResult(ok=False, detail="invalid response")

        if result.get("status") is True or result.get("status") == "success":
            logger.info("WhatsApp message sent", to=masked, provider_id=result.get("id"))
            return DeliveryResult(ok=True, detail=None)

        reason = result.get("reason") or result.get("detail") or "rejected by provider"
        logger.error("Fonnte rejected message", to=masked, reason=reason)
        return DeliveryResult(ok=False, detail=str(reason))


def registration_otp_message(code: str, ttl_minutes: int) -> str:
    return (
        "🔐 *Kode OTP Registrasi*\n\n"
        f"Kode verifikasi: *{code}*\n\n"
        f"Berlaku {ttl_minutes} menit.\nJangan bagikan kode ini!"
    )


def reset_password_otp_message(code: str, ttl_minutes: int) -> str:
    return (
        "🔐 *Kode Reset Password*\n\n"
        f"Kode reset: *{code}*\n\n"
        f"Berlaku {ttl_minutes} menit.\nJangan bagikan kode ini!"
    )


def approval_message(full_name: str) -> str:
    return f"Selamat {full_name}! Akun Anda telah disetujui. Silakan login kembali."
