from pydantic import BaseModel
from typing import Optional, Any


class StandardSuccessResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None


class StandardErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str
    detail: Optional[Any] = None
