"""
Admin API endpoints.

Account moderation, role management, site branding and gateway diagnostics.
Every route sits behind the admin gate.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_admin_service, get_settings_service, require_admin
from models.account import Account, AccountStatus
from schemas.account import AccountRead, MessagingTestRequest, RoleChangeRequest, StatisticsRead
from schemas.app_settings import AppSettingsRead, AppSettingsUpdate
from schemas.responses import StandardSuccessResponse
from services.admin_service import AdminService
from services.settings_service import AppSettingsService

router = APIRouter()


@router.get("/users", response_model=StandardSuccessResponse)
async def list_users(
    status: Optional[AccountStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    accounts = await service.list_accounts(admin, status=status, skip=skip, limit=limit)
    return {
        "success": True,
        "message": f"{len(accounts)} akun",
        "data": [AccountRead.model_validate(account) for account in accounts],
    }


@router.get("/users/pending", response_model=StandardSuccessResponse)
async def pending_users(
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    accounts = await service.pending_approvals(admin)
    return {
        "success": True,
        "message": f"{len(accounts)} akun menunggu persetujuan",
        "data": [AccountRead.model_validate(account) for account in accounts],
    }


@router.post("/users/{account_id}/approve", response_model=StandardSuccessResponse)
async def approve_user(
    account_id: int,
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    account = await service.approve(admin, account_id)
    return {"success": True, "message": "Akun disetujui", "data": AccountRead.model_validate(account)}


@router.post("/users/{account_id}/reject", response_model=StandardSuccessResponse)
async def reject_user(
    account_id: int,
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    account = await service.reject(admin, account_id)
    return {"success": True, "message": "Akun ditolak", "data": AccountRead.model_validate(account)}


@router.post("/users/{account_id}/role", response_model=StandardSuccessResponse)
async def change_user_role(
    account_id: int,
    body: RoleChangeRequest,
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    account = await service.change_role(admin, account_id, body.role)
    return {"success": True, "message": "Peran diperbarui", "data": AccountRead.model_validate(account)}


@router.get("/stats", response_model=StandardSuccessResponse)
async def account_statistics(
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    stats = await service.statistics(admin)
    return {
        "success": True,
        "message": "Statistik akun",
        "data": StatisticsRead(
            total_accounts=stats.total_accounts,
            by_status=stats.by_status,
            pending_approvals=stats.pending_approvals,
            admins=stats.admins,
            total_photos=stats.total_photos,
            total_storage_bytes=stats.total_storage_bytes,
        ),
    }


@router.post("/messaging/test", response_model=StandardSuccessResponse)
async def test_messaging(
    body: MessagingTestRequest,
    admin: Account = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Send a test WhatsApp message through the configured gateway."""
    result = await service.send_test_message(admin, body.phone, body.message)
    return {
        "success": result.ok,
        "message": "Pesan terkirim" if result.ok else "Pesan gagal dikirim",
        "data": {"delivered": result.ok, "detail": result.detail},
    }


@router.put("/settings", response_model=StandardSuccessResponse)
async def update_app_settings(
    body: AppSettingsUpdate,
    admin: Account = Depends(require_admin),
    service: AppSettingsService = Depends(get_settings_service),
):
    """Update site branding; omitted fields are left alone and empty strings clear them."""
    values = await service.update(admin, body.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Pengaturan sistem berhasil diperbarui",
        "data": AppSettingsRead(**values),
    }
