from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.account import AccountRole, AccountStatus


class AccountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phone_number: str
    full_name: str
    role: AccountRole
    status: AccountStatus
    avatar_url: Optional[str] = None
    profile_attributes: Dict[str, Any] = {}
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    profile_attributes: Optional[Dict[str, Any]] = None


class RoleChangeRequest(BaseModel):
    role: AccountRole


class MessagingTestRequest(BaseModel):
    phone: str = Field(..., max_length=32)
    message: str = Field("Tes koneksi Fonnte dari Galeri Foto Komunitas.", max_length=1000)


class StatisticsRead(BaseModel):
    total_accounts: int
    by_status: Dict[str, int]
    pending_approvals: int
    admins: int
    total_photos: int = 0
    total_storage_bytes: int = 0
