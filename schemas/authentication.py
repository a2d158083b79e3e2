from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.authentication import OtpPurpose


class RegisterRequest(BaseModel):
    full_name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=32)
    password: str = Field(..., max_length=128)


class PhoneRequest(BaseModel):
    phone: str = Field(..., max_length=32)
    purpose: OtpPurpose = OtpPurpose.REGISTRATION


class VerifyOtpRequest(BaseModel):
    phone: str = Field(..., max_length=32)
    otp: str = Field(..., max_length=12)


class LoginRequest(BaseModel):
    identifier: str = Field(..., max_length=100, description="Phone number or display name")
    password: str = Field(..., max_length=128)


class ResetPasswordRequest(BaseModel):
    phone: str = Field(..., max_length=32)
    otp: str = Field(..., max_length=12)
    new_password: str = Field(..., max_length=128)


class OtpIssuedData(BaseModel):
    expires_at: datetime


class LoginData(BaseModel):
    account_id: int
    next_route: str
    needs_approval: bool


class SessionStatusData(BaseModel):
    is_authenticated: bool
    is_verified: bool = False
    is_approved: bool = False
    account_id: Optional[int] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
