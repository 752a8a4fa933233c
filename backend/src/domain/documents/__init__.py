"""Documents domain module - approval/review status, upload validation, ports"""

from .document_status import (
    ApprovalStatus,
    ReviewStatus,
    APPROVAL_DECISIONS,
    REVIEW_DECISIONS,
    can_review,
    parse_approval_decision,
    parse_review_decision,
)
from .validation import (
    is_pdf_upload,
    validate_file_size,
    validate_filename,
    sanitize_filename,
    build_storage_name,
    PDF_MIME_TYPES,
    MAX_FILE_SIZE,
)

__all__ = [
    "ApprovalStatus",
    "ReviewStatus",
    "APPROVAL_DECISIONS",
    "REVIEW_DECISIONS",
    "can_review",
    "parse_approval_decision",
    "parse_review_decision",
    "is_pdf_upload",
    "validate_file_size",
    "validate_filename",
    "sanitize_filename",
    "build_storage_name",
    "PDF_MIME_TYPES",
    "MAX_FILE_SIZE",
]
