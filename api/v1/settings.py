"""
Public site branding, read by every page including the login screen.
"""

from fastapi import APIRouter, Depends

from api.deps import get_settings_service
from schemas.app_settings import AppSettingsRead
from schemas.responses import StandardSuccessResponse
from services.settings_service import AppSettingsService

router = APIRouter()


@router.get("", response_model=StandardSuccessResponse)
async def get_app_settings(service: AppSettingsService = Depends(get_settings_service)):
    return {"success": True, "message": "Pengaturan aplikasi", "data": AppSettingsRead(**await service.get())}
