"""Document SQLAlchemy model

Document represents an uploaded PDF awaiting approval and review.
Tracks the public storage link and the two workflow status fields.
"""

from sqlalchemy import Column, Integer, Text, CheckConstraint, Index

from domain.documents.document_status import ApprovalStatus, ReviewStatus
from .base import Base, UTCDateTime, utcnow


class Document(Base):
    """Document model representing a PDF moving through approval and review.

    `uploaded_by`, `approved_by` and `reviewer` are usernames (weak references,
    not foreign keys). Review fields may only be non-Pending while the
    document is Approved.
    """
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_uploaded_by", "uploaded_by"),
        Index("ix_documents_approval_status", "approval_status"),
        CheckConstraint(
            "approval_status IN ('Pending', 'Approved', 'Unapproved')",
            name="ck_documents_approval_status"
        ),
        CheckConstraint(
            "review_status IN ('Pending', 'Approved', 'Rejected')",
            name="ck_documents_review_status"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_name = Column(Text, nullable=False)
    document_link = Column(Text, nullable=False)
    storage_key = Column(Text, nullable=True)
    uploaded_by = Column(Text, nullable=False)
    upload_time = Column(UTCDateTime(), nullable=False, default=utcnow)
    approval_status = Column(Text, nullable=False, default=ApprovalStatus.PENDING.value)
    approved_by = Column(Text, nullable=True)
    approval_time = Column(UTCDateTime(), nullable=True)
    review_status = Column(Text, nullable=False, default=ReviewStatus.PENDING.value)
    reviewer = Column(Text, nullable=True)
    review_time = Column(UTCDateTime(), nullable=True)
