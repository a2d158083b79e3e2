"""
Photos API endpoints.

Gallery listing and the trash. Members manage their own photos; the trash
view, restore and permanent delete sit behind the admin gate.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from api.deps import client_ip, get_photo_service, require_admin, require_member
from models.account import Account
from schemas.photo import BulkDeleteRequest, PhotoCreate, PhotoPageRead, PhotoRead
from schemas.responses import StandardSuccessResponse
from services.photo_service import PhotoPage, PhotoService, UploadContext

router = APIRouter()


def _page(page: PhotoPage) -> PhotoPageRead:
    return PhotoPageRead(photos=[PhotoRead.model_validate(photo) for photo in page.photos], total=page.total)


@router.get("", response_model=StandardSuccessResponse)
async def list_photos(
    q: Optional[str] = Query(None, max_length=100),
    owner_id: Optional[int] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(24, ge=1, le=100),
    account: Account = Depends(require_member),
    photos: PhotoService = Depends(get_photo_service),
):
    """
    List gallery photos, newest first.

    - **q**: case-insensitive match on the file name
    - **owner_id**: admins only; members always get their own photos
    """
    page = await photos.list_photos(account, owner_id=owner_id, search=q, skip=skip, limit=limit)
    return {"success": True, "message": f"{page.total} foto", "data": _page(page)}


@router.post("", response_model=StandardSuccessResponse, status_code=status.HTTP_201_CREATED)
async def record_photo(
    body: PhotoCreate,
    request: Request,
    account: Account = Depends(require_member),
    photos: PhotoService = Depends(get_photo_service),
):
    """Register a photo the client has already uploaded to storage."""
    photo = await photos.record_upload(
        account,
        storage_path=body.storage_path,
        display_url=body.display_url,
        file_name=body.file_name,
        file_size=body.file_size,
        mime_type=body.mime_type,
        exif_data=body.exif_data,
        context=UploadContext(ip_address=client_ip(request), user_agent=request.headers.get("user-agent")),
    )
    return {"success": True, "message": "Foto berhasil diupload", "data": PhotoRead.model_validate(photo)}


@router.delete("/{photo_id}", response_model=StandardSuccessResponse)
async def delete_photo(
    photo_id: int,
    account: Account = Depends(require_member),
    photos: PhotoService = Depends(get_photo_service),
):
    await photos.soft_delete(account, photo_id)
    return {"success": True, "message": "Foto dipindahkan ke tempat sampah"}


@router.post("/bulk-delete", response_model=StandardSuccessResponse)
async def bulk_delete_photos(
    body: BulkDeleteRequest,
    account: Account = Depends(require_member),
    photos: PhotoService = Depends(get_photo_service),
):
    moved = await photos.bulk_soft_delete(account, body.photo_ids)
    return {"success": True, "message": f"{moved} foto berhasil dihapus", "data": {"deleted": moved}}


@router.get("/trash", response_model=StandardSuccessResponse)
async def list_trash(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: Account = Depends(require_admin),
    photos: PhotoService = Depends(get_photo_service),
):
    page = await photos.list_trash(admin, skip=skip, limit=limit)
    return {"success": True, "message": f"{page.total} foto di tempat sampah", "data": _page(page)}


@router.post("/{photo_id}/restore", response_model=StandardSuccessResponse)
async def restore_photo(
    photo_id: int,
    admin: Account = Depends(require_admin),
    photos: PhotoService = Depends(get_photo_service),
):
    photo = await photos.restore(admin, photo_id)
    return {"success": True, "message": "Foto berhasil dipulihkan", "data": PhotoRead.model_validate(photo)}


@router.delete("/{photo_id}/permanent", response_model=StandardSuccessResponse)
async def permanently_delete_photo(
    photo_id: int,
    admin: Account = Depends(require_admin),
    photos: PhotoService = Depends(get_photo_service),
):
    storage_path = await photos.permanent_delete(admin, photo_id)
    return {
        "success": True,
        "message": "Foto berhasil dihapus permanen",
        "data": {"storage_path": storage_path},
    }
