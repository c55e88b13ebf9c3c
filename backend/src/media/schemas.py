"""Pydantic schemas for media upload endpoints."""

from typing import Optional
from uuid import UUID

from pydantic import Field

from schemas.common import ApiModel


class PresignUploadRequest(ApiModel):
    filename: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=1)
    size: int = Field(..., gt=0)
    key_prefix: str = Field("uploads", min_length=1, max_length=100)
    tenant_id: Optional[UUID] = None
    kind: str = "general"


class PresignUploadResponse(ApiModel):
    key: str
    upload_url: str
    public_url: str
    bucket: str


class CommitUploadRequest(ApiModel):
    key: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)
    size: int = Field(..., gt=0)
    tenant_id: Optional[UUID] = None
    kind: str = "general"


class MediaAssetResponse(ApiModel):
    id: UUID
    key: str
    url: str
    kind: str
