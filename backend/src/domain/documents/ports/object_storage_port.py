"""Object Storage Port - Domain interface for S3-compatible storage.

This port defines the contract for storing documents in object storage and
obtaining a durable public link for them. Adapters implement it for S3,
MinIO, or other storage backends.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class StoredFile:
    """Metadata for a file stored in object storage.

    Attributes:
        storage_key: Unique key in object storage (format: {year}/{month}/{storage_name})
        public_url: Durable URL anyone can use to download the file
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file (e.g., 'application/pdf')
    """
    storage_key: str
    public_url: str
    sha256: str
    size_bytes: int
    mime_type: str


class ObjectStoragePort(ABC):
    """Port interface for S3-compatible object storage operations.

    Example Usage:
        storage = S3StorageAdapter(...)

        with open('contract.pdf', 'rb') as f:
            stored = await storage.store_file(
                file=f,
                storage_name='1735689600000-contract.pdf',
                mime_type='application/pdf'
            )
        await storage.make_public(stored.storage_key)
    """

    @abstractmethod
    async def store_file(
        self,
        file: BinaryIO,
        storage_name: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file in object storage.

        Args:
            file: Binary file stream to store (must be readable)
            storage_name: Collision-resistant object name chosen by the caller
            mime_type: MIME type of the file

        Returns:
            StoredFile: Metadata about the stored file including its public URL

        Raises:
            StorageError: If upload fails or storage is unavailable
            ValueError: If file is empty
        """
        pass

    @abstractmethod
    async def make_public(self, storage_key: str) -> None:
        """Grant anonymous read access to a stored file.

        Raises:
            StorageError: If the permission cannot be granted
        """
        pass

    @abstractmethod
    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from object storage.

        Returns:
            bool: True if file was deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in object storage (HEAD request only)."""
        pass
