"""Document Repository Port - persistence contract used by the workflow engine.

One synchronous interface covers every read and write the engine performs.
Mutating methods are atomic: each one commits its own unit of work, so a
later notification failure can never roll a transition back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from ..document_status import ApprovalStatus, ReviewStatus


class DocumentRecord(Protocol):
    """Read shape of a persisted document."""
    id: int
    document_name: str
    document_link: str
    storage_key: Optional[str]
    uploaded_by: str
    upload_time: datetime
    approval_status: str
    approved_by: Optional[str]
    approval_time: Optional[datetime]
    review_status: str
    reviewer: Optional[str]
    review_time: Optional[datetime]


@dataclass
class NewDocument:
    """Values needed to insert a freshly uploaded document."""
    document_name: str
    document_link: str
    storage_key: str
    uploaded_by: str
    upload_time: datetime


class DocumentRepositoryPort(ABC):
    """Persistence operations for documents."""

    @abstractmethod
    def add(self, document: NewDocument) -> DocumentRecord:
        """Insert a document with Pending approval and review status."""
        pass

    @abstractmethod
    def get(self, document_id: int) -> Optional[DocumentRecord]:
        """Fetch one document, or None."""
        pass

    @abstractmethod
    def set_approval(
        self,
        document_id: int,
        status: ApprovalStatus,
        approved_by: str,
        approval_time: datetime,
    ) -> Optional[DocumentRecord]:
        """Record an approval decision.

        Sets status, approver and time in one statement. An Unapproved
        decision also resets the review fields to Pending.

        Returns:
            The updated document, or None if no document has that id
        """
        pass

    @abstractmethod
    def set_review_for_uploader(
        self,
        uploaded_by: str,
        status: ReviewStatus,
        reviewer: str,
        review_time: datetime,
        document_id: Optional[int] = None,
    ) -> List[DocumentRecord]:
        """Record a review decision on the uploader's Approved documents.

        Only rows with approval_status = Approved are touched. When
        document_id is given the update is narrowed to that document.

        Returns:
            The updated documents (possibly empty)
        """
        pass

    @abstractmethod
    def list_all(self) -> List[DocumentRecord]:
        """All documents, newest first."""
        pass

    @abstractmethod
    def list_by_uploader(self, uploaded_by: str, partial: bool = False) -> List[DocumentRecord]:
        """Documents of one uploader, newest first.

        Args:
            uploaded_by: Uploader username (or fragment when partial)
            partial: Substring match instead of exact match
        """
        pass

    @abstractmethod
    def list_by_approval_status(self, status: ApprovalStatus) -> List[DocumentRecord]:
        """Documents in one approval state, newest first."""
        pass
