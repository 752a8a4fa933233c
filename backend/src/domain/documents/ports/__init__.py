"""Ports the documents domain depends on"""

from .object_storage_port import ObjectStoragePort, StoredFile
from .document_repository_port import DocumentRepositoryPort, DocumentRecord, NewDocument

__all__ = [
    "ObjectStoragePort",
    "StoredFile",
    "DocumentRepositoryPort",
    "DocumentRecord",
    "NewDocument",
]
