"""Storage configuration for S3-compatible object storage.

Built from application settings. Supports both MinIO (development) and
AWS S3 (production) with the same interface.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for storing documents
        region: AWS region (default: 'us-east-1')
        public_base_url: Base for document links (CDN or public bucket host)
        timeout_seconds: Connect and read timeout for S3 calls
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    public_base_url: Optional[str] = None
    timeout_seconds: int = 10


def storage_config_from_settings(settings: Settings) -> StorageConfig:
    """Build and validate storage configuration from settings.

    Raises:
        ValueError: If configuration is invalid
    """
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL or None,
        timeout_seconds=settings.S3_TIMEOUT_SECONDS,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    for name, url in (("endpoint_url", config.endpoint_url), ("public_base_url", config.public_base_url)):
        if url and not url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid {name}: {url}. Must start with http:// or https://")

    if not config.endpoint_url and not config.region:
        raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")

    if config.timeout_seconds <= 0:
        raise ValueError("Storage timeout_seconds must be positive")
