"""S3 Storage Adapter - presigned uploads to S3-compatible storage using boto3.

Clients upload media directly to the bucket with a short-lived presigned PUT
URL; the API never proxies file bytes.
"""

import logging
import re
import time
from functools import lru_cache
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from auth.tokens import random_token
from .storage_config import StorageConfig, load_storage_config

logger = logging.getLogger(__name__)

PRESIGN_EXPIRES_SECONDS = 3600

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [a-zA-Z0-9._-] with '-'."""
    return _UNSAFE_FILENAME_CHARS.sub("-", filename)


def build_object_key(key_prefix: str, filename: str) -> str:
    """Build a collision-resistant key: {prefix}/{epoch_ms}-{random}-{filename}."""
    prefix = key_prefix.strip("/") or "uploads"
    return f"{prefix}/{int(time.time() * 1000)}-{random_token(6)}-{sanitize_filename(filename)}"


def public_asset_url(key: str, config: Optional[StorageConfig] = None) -> str:
    """Public URL for a stored object.

    With an endpoint: {endpoint}/{bucket}/{key}. Without one the API base URL
    serves assets under /assets/{key}.
    """
    config = config or load_storage_config()
    if not config.endpoint_url:
        return f"{config.public_base_url.rstrip('/')}/assets/{key}"
    return f"{config.endpoint_url.rstrip('/')}/{config.bucket_name}/{key}"


class S3StorageAdapter:
    """S3-compatible storage adapter using boto3.

    Example:
        storage = S3StorageAdapter.from_config(load_storage_config())
        url = storage.generate_presigned_upload_url("uploads/a.jpg", "image/jpeg")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        force_path_style: bool = True,
    ):
        """Initialize S3 storage adapter.

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            # boto3.client() would share the default session, which is not thread-safe
            self.s3_client = boto3.session.Session().client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path" if force_path_style else "auto"},
                ),
            )
        except (BotoCoreError, ValueError) as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        logger.info(
            f"Initialized S3 storage adapter: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3StorageAdapter":
        return cls(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            force_path_style=config.force_path_style,
        )

    def generate_presigned_upload_url(
        self,
        storage_key: str,
        content_type: str,
        expires_in_seconds: int = PRESIGN_EXPIRES_SECONDS,
    ) -> str:
        """Generate a presigned URL for a direct PUT upload.

        The uploader must send the same Content-Type header that was signed.

        Raises:
            StorageError: If URL generation fails
        """
        try:
            url = self.s3_client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": storage_key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Presigned URL generation failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to generate presigned URL: {e}")

        logger.info(
            f"Generated presigned upload URL: storage_key={storage_key}, "
            f"expires_in={expires_in_seconds}s"
        )
        return url


@lru_cache(maxsize=4)
def storage_adapter_for(config: StorageConfig) -> S3StorageAdapter:
    """One adapter (and boto3 client) per distinct storage configuration."""
    return S3StorageAdapter.from_config(config)


def get_storage_adapter() -> Optional[S3StorageAdapter]:
    """FastAPI dependency: the shared adapter, or None without credentials."""
    config = load_storage_config()
    if not config.is_configured:
        return None
    return storage_adapter_for(config)
