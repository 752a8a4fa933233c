"""File validation utilities for document uploads

Only PDF documents enter the workflow. Checks run before anything is
written to object storage or the database.
"""

import os
import re
from datetime import datetime
from typing import Optional, Tuple


# Accepted PDF MIME types (browsers and some scanners differ)
PDF_MIME_TYPES = {
    'application/pdf',
    'application/x-pdf',
}

PDF_EXTENSION = '.pdf'

# File size limit (default 25MB, configurable via env)
MAX_FILE_SIZE = int(os.getenv('MAX_UPLOAD_SIZE_BYTES', 25 * 1024 * 1024))


def is_pdf_upload(filename: str, content_type: Optional[str]) -> bool:
    """Check that an upload is a PDF by extension and declared content type

    The extension must be .pdf (any case). A content type is optional, but
    when the client sends one it must be a PDF type.

    Example:
        >>> is_pdf_upload('contract.PDF', 'application/pdf')
        True
        >>> is_pdf_upload('contract.pdf', None)
        True
        >>> is_pdf_upload('contract.docx', 'application/pdf')
        False
        >>> is_pdf_upload('contract.pdf', 'image/png')
        False
    """
    if not filename or os.path.splitext(filename)[1].lower() != PDF_EXTENSION:
        return False

    if content_type:
        # Strip parameters such as "; charset=binary"
        mime_type = content_type.split(';', 1)[0].strip().lower()
        return mime_type in PDF_MIME_TYPES

    return True


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal or directory separators
    - No null bytes or control characters

    Example:
        >>> validate_filename('contract.pdf')
        (True, None)
        >>> validate_filename('../../etc/passwd')
        (False, 'Filename contains path traversal or directory separators')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if filename in ('.', '..') or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage

    Example:
        >>> sanitize_filename('../../contract.pdf')
        'contract.pdf'
        >>> sanitize_filename('contract (copy).pdf')
        'contract_copy_.pdf'
    """
    filename = os.path.basename(filename)

    # Replace problematic characters with underscore
    filename = re.sub(r'[^\w\s.-]', '_', filename)

    # Collapse multiple spaces/underscores
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        max_name_len = 255 - len(ext)
        filename = name[:max_name_len] + ext

    return filename


def build_storage_name(filename: str, now: datetime) -> str:
    """Build a collision-resistant object name: {epoch_millis}-{sanitized filename}

    Example:
        >>> from datetime import datetime, timezone
        >>> build_storage_name('q3 report.pdf', datetime(2025, 1, 1, tzinfo=timezone.utc))
        '1735689600000-q3_report.pdf'
    """
    millis = int(now.timestamp() * 1000)
    return f"{millis}-{sanitize_filename(filename)}"
