from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PhotoCreate(BaseModel):
    storage_path: str = Field(..., min_length=1, max_length=500)
    display_url: str = Field(..., min_length=1, max_length=500)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, max_length=100)
    exif_data: Optional[Dict[str, Any]] = None


class PhotoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    storage_path: str
    display_url: str
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    exif_data: Dict[str, Any] = {}
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PhotoPageRead(BaseModel):
    photos: List[PhotoRead]
    total: int


class BulkDeleteRequest(BaseModel):
    photo_ids: List[int] = Field(..., min_length=1)
