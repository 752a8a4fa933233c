"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other
S3-compatible services. Uploaded documents are made world-readable so the
stored link can be opened by anyone in the workflow.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import BinaryIO, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from domain.documents.ports.object_storage_port import (
    ObjectStoragePort,
    StoredFile,
)
from domain.errors import StorageError
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Features:
    - SHA256 computed while reading the stream
    - public-read ACL grant after upload
    - Storage key format: {year}/{month}/{storage_name}

    Example:
        config = storage_config_from_settings(get_settings())
        storage = S3StorageAdapter.from_config(config)

        with open('contract.pdf', 'rb') as f:
            stored = await storage.store_file(
                file=f,
                storage_name='1735689600000-contract.pdf',
                mime_type='application/pdf',
            )
        await storage.make_public(stored.storage_key)
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
        timeout_seconds: int = 10,
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')
            public_base_url: Base URL for public links (defaults to the endpoint)
            timeout_seconds: Connect and read timeout for every call

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=Config(
                    connect_timeout=timeout_seconds,
                    read_timeout=timeout_seconds,
                    retries={"max_attempts": 3, "mode": "standard"},
                ),
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url

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
            public_base_url=config.public_base_url,
            timeout_seconds=config.timeout_seconds,
        )

    async def store_file(
        self,
        file: BinaryIO,
        storage_name: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file in S3.

        Implementation:
        1. Reads file in chunks (8KB) while calculating SHA256
        2. Generates storage key: {year}/{month}/{storage_name}
        3. Uploads the content with its SHA256 in object metadata

        Raises:
            StorageError: If upload fails
            ValueError: If file is empty
        """
        sha256_hash = hashlib.sha256()
        chunks = []
        size_bytes = 0

        chunk_size = 8192  # 8KB chunks
        while True:
            chunk = file.read(chunk_size)
            if not chunk:
                break
            sha256_hash.update(chunk)
            chunks.append(chunk)
            size_bytes += len(chunk)

        if size_bytes == 0:
            raise ValueError("Cannot store empty file")

        sha256_hex = sha256_hash.hexdigest()
        storage_key = self._generate_storage_key(storage_name)

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(b"".join(chunks)),
                ContentType=mime_type,
                Metadata={"sha256": sha256_hex},
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 upload failed: storage_key={storage_key}, message={e}")
            raise StorageError(f"Failed to upload file: {e}")

        logger.info(
            f"Uploaded file: storage_key={storage_key}, "
            f"sha256={sha256_hex}, size={size_bytes}, mime_type={mime_type}"
        )

        return StoredFile(
            storage_key=storage_key,
            public_url=self.public_url(storage_key),
            sha256=sha256_hex,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

    async def make_public(self, storage_key: str) -> None:
        """Grant anonymous read on the object (public-read canned ACL).

        Raises:
            StorageError: If the ACL cannot be applied
        """
        try:
            self.s3_client.put_object_acl(
                Bucket=self.bucket_name,
                Key=storage_key,
                ACL="public-read",
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 ACL update failed: storage_key={storage_key}, error={error_code}"
            )
            raise StorageError(f"Failed to make file public: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 ACL update failed: storage_key={storage_key}, message={e}")
            raise StorageError(f"Failed to make file public: {e}")

        logger.info(f"Granted public read: storage_key={storage_key}")

    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from S3.

        Returns:
            bool: True if deleted, False if didn't exist

        Raises:
            StorageError: If deletion fails
        """
        try:
            if not await self.file_exists(storage_key):
                logger.info(f"File not found for deletion: storage_key={storage_key}")
                return False

            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")
        except BotoCoreError as e:
            logger.error(f"S3 deletion failed: storage_key={storage_key}, message={e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in S3 (HEAD request).

        Raises:
            StorageError: If the check fails for a reason other than a missing key
        """
        try:
            self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.warning(
                f"Error checking file existence: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to check file: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to check file: {e}")

    def public_url(self, storage_key: str) -> str:
        """Durable link to an object.

        Uses the configured public base URL, then the custom endpoint
        (path-style), then the AWS virtual-hosted URL.
        """
        key = quote(storage_key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def _generate_storage_key(self, storage_name: str) -> str:
        """Generate storage key in format: {year}/{month}/{storage_name}

        Example:
            >>> adapter._generate_storage_key('1735689600000-contract.pdf')
            '2025/01/1735689600000-contract.pdf'
        """
        now = datetime.now(timezone.utc)
        return f"{now.year}/{now.month:02d}/{storage_name}"

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Called on application startup to fail fast if the bucket is missing.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            logger.info(f"Verified bucket exists: {self.bucket_name}")
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")
