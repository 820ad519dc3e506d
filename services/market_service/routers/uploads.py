"""Farmer media uploads to object storage."""

from fastapi import APIRouter, Depends, Request, status
from libs.auth.dependencies import require_farmer_or_admin
from libs.auth.models import AuthUser
from libs.common.rate_limit import upload_limit
from libs.common.responses import ApiResponse, ok
from services.market_service.schemas import (
    Base64UploadRequest,
    PresignRequest,
    PresignResponse,
    UploadResponse,
)
from services.market_service.services.storage import (
    OssStorage,
    decode_file_data,
    get_storage,
)

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])


@router.post(
    "/presign",
    response_model=ApiResponse[PresignResponse],
    status_code=status.HTTP_201_CREATED,
)
@upload_limit
async def presign_upload(
    request: Request,
    payload: PresignRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    storage: OssStorage = Depends(get_storage),
):
    """Signed PUT URL the client uploads to directly."""
    credential = storage.presign_upload(
        user_id=current_user.user_id,
        file_name=payload.file_name,
        content_type=payload.content_type,
    )
    return ok(
        PresignResponse(
            upload_url=credential.upload_url,
            object_key=credential.object_key,
            expires_at=credential.expires_at,
            headers=credential.headers,
            public_url=credential.public_url,
        )
    )


@router.post(
    "/base64",
    response_model=ApiResponse[UploadResponse],
    status_code=status.HTTP_201_CREATED,
)
@upload_limit
async def upload_base64(
    request: Request,
    payload: Base64UploadRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    storage: OssStorage = Depends(get_storage),
):
    """Server-side upload of a base64 payload or ``data:`` URI."""
    storage.ensure_enabled()
    data, content_type = decode_file_data(payload.file_data, payload.file_type)
    stored = await storage.upload_bytes(
        user_id=current_user.user_id,
        data=data,
        file_name=payload.file_name,
        content_type=content_type,
        directory=payload.directory,
    )
    return ok(
        UploadResponse(url=stored.url, object_key=stored.object_key, size=stored.size)
    )
