"""Document repository for database operations"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.documents.document_status import ApprovalStatus, ReviewStatus
from domain.documents.ports import DocumentRepositoryPort, NewDocument
from models.document import Document


class SqlAlchemyDocumentRepository(DocumentRepositoryPort):
    """Repository for documents table operations.

    Every mutation is a single statement followed by a commit, so a
    transition is either fully recorded or not at all.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def add(self, document: NewDocument) -> Document:
        db_document = Document(
            document_name=document.document_name,
            document_link=document.document_link,
            storage_key=document.storage_key,
            uploaded_by=document.uploaded_by,
            upload_time=document.upload_time,
            approval_status=ApprovalStatus.PENDING.value,
            review_status=ReviewStatus.PENDING.value,
        )
        self.db.add(db_document)
        self._commit()
        self.db.refresh(db_document)
        return db_document

    def get(self, document_id: int) -> Optional[Document]:
        return self.db.get(Document, document_id)

    def set_approval(
        self,
        document_id: int,
        status: ApprovalStatus,
        approved_by: str,
        approval_time: datetime,
    ) -> Optional[Document]:
        values = {
            "approval_status": status.value,
            "approved_by": approved_by,
            "approval_time": approval_time,
        }
        if status == ApprovalStatus.UNAPPROVED:
            # Review is only meaningful on an Approved document
            values.update(review_status=ReviewStatus.PENDING.value, reviewer=None, review_time=None)

        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .values(**values)
            .returning(Document.id)
        )
        updated_ids = self._execute_update(stmt)
        if not updated_ids:
            return None
        return self.db.get(Document, document_id, populate_existing=True)

    def set_review_for_uploader(
        self,
        uploaded_by: str,
        status: ReviewStatus,
        reviewer: str,
        review_time: datetime,
        document_id: Optional[int] = None,
    ) -> List[Document]:
        conditions = [
            Document.uploaded_by == uploaded_by,
            Document.approval_status == ApprovalStatus.APPROVED.value,
        ]
        if document_id is not None:
            conditions.append(Document.id == document_id)

        stmt = (
            update(Document)
            .where(and_(*conditions))
            .values(review_status=status.value, reviewer=reviewer, review_time=review_time)
            .returning(Document.id)
        )
        updated_ids = self._execute_update(stmt)
        if not updated_ids:
            return []

        query = (
            select(Document)
            .where(Document.id.in_(updated_ids))
            .order_by(Document.upload_time.desc(), Document.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(query).scalars().all())

    def list_all(self) -> List[Document]:
        return self._list()

    def list_by_uploader(self, uploaded_by: str, partial: bool = False) -> List[Document]:
        if partial:
            pattern = _escape_like(uploaded_by)
            return self._list(Document.uploaded_by.ilike(f"%{pattern}%", escape="\\"))
        return self._list(Document.uploaded_by == uploaded_by)

    def list_by_approval_status(self, status: ApprovalStatus) -> List[Document]:
        return self._list(Document.approval_status == status.value)

    def _list(self, *conditions) -> List[Document]:
        query = select(Document)
        if conditions:
            query = query.where(*conditions)
        query = query.order_by(Document.upload_time.desc(), Document.id.desc())
        return list(self.db.execute(query).scalars().all())

    def _execute_update(self, stmt) -> List[int]:
        try:
            updated_ids = list(self.db.execute(stmt).scalars().all())
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated_ids

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
