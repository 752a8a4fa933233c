"""Temporary on-disk copies of uploads.

An upload is staged to disk before it is sent to object storage. The
workflow engine decides when the staged copy may be discarded: never
before the document row is persisted, unless the upload is rejected or
storage fails outright.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


@dataclass
class StagedUpload:
    """An uploaded file held in the staging directory."""
    path: Path
    filename: str
    content_type: Optional[str]
    size_bytes: int

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def discard(self) -> None:
        """Delete the staged copy. Safe to call more than once."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove staged upload {self.path}: {e}")


def stage_bytes(
    content: bytes,
    filename: str,
    content_type: Optional[str],
    directory: str,
) -> StagedUpload:
    """Write upload content to a unique file in the staging directory.

    Args:
        content: Raw upload bytes
        filename: Original client filename (kept for validation and naming)
        content_type: Declared MIME type, if any
        directory: Staging directory (created if missing)

    Returns:
        StagedUpload pointing at the written file
    """
    os.makedirs(directory, exist_ok=True)
    fd, raw_path = tempfile.mkstemp(prefix="upload-", suffix=".part", dir=directory)
    with os.fdopen(fd, "wb") as handle:
        handle.write(content)

    return StagedUpload(
        path=Path(raw_path),
        filename=filename,
        content_type=content_type,
        size_bytes=len(content),
    )
