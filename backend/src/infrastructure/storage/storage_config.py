"""Storage configuration for S3-compatible object storage.

Builds the storage configuration from application settings. Supports both
MinIO (development) and AWS S3 (production) with the same interface.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: Bucket receiving media uploads
        region: AWS region (default: 'us-east-1')
        force_path_style: Address buckets as {endpoint}/{bucket} rather than
                          {bucket}.{endpoint}; required by MinIO
        public_base_url: Fallback base for public asset URLs when no endpoint
                         is configured
    """
    endpoint_url: Optional[str]
    access_key: Optional[str]
    secret_key: Optional[str]
    bucket_name: str
    region: str = "us-east-1"
    force_path_style: bool = True
    public_base_url: str = "http://localhost:4000"

    @property
    def is_configured(self) -> bool:
        """Presigning needs an endpoint and both credentials."""
        return bool(self.endpoint_url and self.access_key and self.secret_key)


def load_storage_config(settings: Optional[Settings] = None) -> StorageConfig:
    """Load storage configuration from validated settings.

    Environment Variables:
        S3_ENDPOINT: Endpoint URL, e.g. http://localhost:9000
        S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY: Credentials
        S3_BUCKET: Bucket name (default: 'uaetrail-assets')
        S3_REGION: Region (default: 'us-east-1')
        S3_FORCE_PATH_STYLE: Path-style addressing (default: true)
    """
    settings = settings or get_settings()
    return StorageConfig(
        endpoint_url=settings.s3_endpoint,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET,
        region=settings.S3_REGION,
        force_path_style=settings.S3_FORCE_PATH_STYLE,
        public_base_url=settings.api_base_url,
    )
