"""S3-compatible object storage for media uploads."""

from .storage_config import StorageConfig, load_storage_config
from .s3_storage_adapter import (
    PRESIGN_EXPIRES_SECONDS,
    S3StorageAdapter,
    StorageError,
    build_object_key,
    get_storage_adapter,
    public_asset_url,
    sanitize_filename,
    storage_adapter_for,
)

__all__ = [
    "StorageConfig",
    "load_storage_config",
    "PRESIGN_EXPIRES_SECONDS",
    "S3StorageAdapter",
    "StorageError",
    "build_object_key",
    "get_storage_adapter",
    "public_asset_url",
    "sanitize_filename",
    "storage_adapter_for",
]
