"""
Error taxonomy for the authentication and moderation flows.

Every error carries an HTTP status, a stable machine code and a message that
is safe to show to the person at the keyboard.
"""

from typing import Optional


class GaleriError(Exception):
    status_code = 400
    code = "error"
    message = "Terjadi kesalahan. Silakan coba lagi."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class InvalidPhoneFormat(GaleriError):
    code = "invalid_phone_format"
    message = "Format nomor tidak valid. Gunakan format: 08xxx atau +62xxx"


class ValidationFailed(GaleriError):
    status_code = 422
    code = "validation_failed"


class RateLimited(GaleriError):
    status_code = 429
    code = "rate_limited"
    message = "Tunggu sebentar sebelum meminta kode OTP baru."

    def __init__(self, retry_after: Optional[int] = None, **kwargs):
        self.retry_after = retry_after
        super().__init__(**kwargs)


class PersistenceFailure(GaleriError):
    status_code = 503
    code = "persistence_failure"
    message = "Terjadi kesalahan server. Silakan coba lagi."


class MessagingDeliveryFailure(GaleriError):
    status_code = 502
    code = "messaging_delivery_failure"
    message = "Gagal mengirim pesan WhatsApp. Silakan coba lagi."


class NoActiveChallenge(GaleriError):
    code = "no_active_challenge"
    message = "Tidak ada kode OTP aktif. Minta kode OTP baru."


class Expired(GaleriError):
    code = "otp_expired"
    message = "Kode OTP sudah kadaluarsa. Minta kode OTP baru."


class AttemptsExceeded(GaleriError):
    status_code = 429
    code = "attempts_exceeded"
    message = "Terlalu banyak percobaan. Minta kode OTP baru."


class CodeMismatch(GaleriError):
    code = "code_mismatch"
    message = "Kode OTP salah."

    def __init__(self, attempts_remaining: int = 0, **kwargs):
        self.attempts_remaining = attempts_remaining
        super().__init__(**kwargs)


class Forbidden(GaleriError):
    status_code = 403
    code = "forbidden"
    message = "Akses ditolak."


class InvalidTransition(GaleriError):
    status_code = 409
    code = "invalid_transition"
    message = "Status akun tidak dapat diubah."


class AccountExists(GaleriError):
    status_code = 409
    code = "account_exists"
    message = "Nomor WhatsApp sudah terdaftar. Silakan login."


class AccountNotFound(GaleriError):
    status_code = 404
    code = "account_not_found"
    message = "Nomor WhatsApp tidak terdaftar. Pastikan nomor Anda benar."


class InvalidCredentials(GaleriError):
    status_code = 401
    code = "invalid_credentials"
    message = "Nomor/Nama atau password salah."


class GateRedirect(Exception):
    """Raised by the session gate to send the caller to another page."""

    def __init__(self, location: str, clear_session: bool = False):
        self.location = location
        self.clear_session = clear_session
        super().__init__(location)


class PhotoNotFound(GaleriError):
    status_code = 404
    code = "photo_not_found"
    message = "Foto tidak ditemukan."
