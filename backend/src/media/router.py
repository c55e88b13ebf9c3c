"""Media upload endpoints.

Uploads are two-step: the client asks for a presigned PUT URL, uploads the
file straight to object storage, then commits the key so the API records a
MediaAsset.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from audit.service import log_from_request
from auth.dependencies import VerifiedUser
from database import get_db
from errors import ApiError
from infrastructure.storage import (
    S3StorageAdapter,
    StorageError,
    build_object_key,
    get_storage_adapter,
    load_storage_config,
    public_asset_url,
)
from models.media_asset import MediaAsset
from models.tenant import TenantMembership
from models.user import User, UserRole
from observability.metrics import media_uploads_total
from schemas.common import DataResponse
from .schemas import CommitUploadRequest, MediaAssetResponse, PresignUploadRequest, PresignUploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["Media"])


def ensure_tenant_upload_access(db: Session, user: User, tenant_id: Optional[UUID]) -> None:
    """Uploads on behalf of a tenant need a membership in it or the platform_admin role.

    Raises:
        ApiError 403 forbidden
    """
    if tenant_id is None or user.role == UserRole.PLATFORM_ADMIN.value:
        return
    membership = db.query(TenantMembership).filter(
        TenantMembership.tenant_id == tenant_id,
        TenantMembership.user_id == user.id,
    ).first()
    if not membership:
        raise ApiError(status.HTTP_403_FORBIDDEN, "forbidden", "No tenant permission for media upload.")


@router.post("/presign-upload", response_model=DataResponse[PresignUploadResponse])
def presign_upload(
    body: PresignUploadRequest,
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[Optional[S3StorageAdapter], Depends(get_storage_adapter)],
):
    """Issue a presigned PUT URL for a new object key.

    Raises:
        ApiError 403 forbidden: No access to the given tenant
        ApiError 503 storage_not_configured: Object storage credentials are missing
    """
    ensure_tenant_upload_access(db, current_user, body.tenant_id)

    if storage is None:
        raise ApiError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "storage_not_configured",
            "S3-compatible storage is not configured.",
        )

    key = build_object_key(body.key_prefix, body.filename)
    try:
        upload_url = storage.generate_presigned_upload_url(key, body.mime_type)
    except StorageError as e:
        logger.error(f"Presign failed for {key}: {e}", extra={"user_id": current_user.id})
        raise ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, "storage_unavailable", "Object storage is unavailable.")

    media_uploads_total.labels("presigned").inc()
    return DataResponse(data=PresignUploadResponse(
        key=key,
        upload_url=upload_url,
        public_url=public_asset_url(key),
        bucket=storage.bucket_name,
    ))


@router.post(
    "/commit",
    response_model=DataResponse[MediaAssetResponse],
    status_code=status.HTTP_201_CREATED,
)
def commit_upload(
    body: CommitUploadRequest,
    request: Request,
    current_user: VerifiedUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Record an uploaded object as a MediaAsset.

    Raises:
        ApiError 403 forbidden: No access to the given tenant
    """
    ensure_tenant_upload_access(db, current_user, body.tenant_id)

    config = load_storage_config()
    asset = MediaAsset(
        key=body.key,
        url=public_asset_url(body.key, config),
        bucket=config.bucket_name,
        mime_type=body.mime_type,
        size=body.size,
        kind=body.kind,
        uploaded_by_id=current_user.id,
        tenant_id=body.tenant_id,
    )
    db.add(asset)
    db.flush()

    log_from_request(
        db=db,
        request=request,
        action="media.commit",
        actor_id=current_user.id,
        entity_type="media_asset",
        entity_id=asset.id,
        tenant_id=body.tenant_id,
        metadata={"key": asset.key, "size": asset.size, "mimeType": asset.mime_type},
    )
    db.commit()

    media_uploads_total.labels("committed").inc()
    return DataResponse(data=MediaAssetResponse.model_validate(asset))
