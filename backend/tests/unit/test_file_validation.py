"""Unit tests for upload validation"""

from datetime import datetime, timezone

import pytest

from domain.documents.validation import (
    build_storage_name,
    is_pdf_upload,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)


class TestIsPdfUpload:
    """Test PDF detection by extension and content type"""

    @pytest.mark.parametrize("filename,content_type", [
        ("contract.pdf", "application/pdf"),
        ("CONTRACT.PDF", "application/pdf"),
        ("scan.pdf", "application/x-pdf"),
        ("scan.pdf", "application/pdf; charset=binary"),
        ("scan.pdf", None),
    ])
    def test_accepts_pdf(self, filename, content_type):
        assert is_pdf_upload(filename, content_type) is True

    @pytest.mark.parametrize("filename,content_type", [
        ("contract.docx", "application/pdf"),
        ("contract.pdf", "image/png"),
        ("contract", "application/pdf"),
        ("", "application/pdf"),
        ("contract.pdf.exe", None),
    ])
    def test_rejects_non_pdf(self, filename, content_type):
        assert is_pdf_upload(filename, content_type) is False


class TestValidateFileSize:
    """Test file size limits"""

    def test_within_limit(self):
        assert validate_file_size(1024, max_size=2048) == (True, None)

    def test_exactly_at_limit(self):
        assert validate_file_size(2048, max_size=2048) == (True, None)

    def test_empty_file(self):
        is_valid, error = validate_file_size(0)
        assert is_valid is False
        assert "empty" in error

    def test_over_limit(self):
        is_valid, error = validate_file_size(2049, max_size=2048)
        assert is_valid is False
        assert "2048" in error


class TestValidateFilename:
    """Test filename validation"""

    def test_valid_filename(self):
        assert validate_filename("Q3 report (final).pdf") == (True, None)

    @pytest.mark.parametrize("filename", ["Q3..final.pdf", "a..b.pdf", "...pdf"])
    def test_consecutive_dots_allowed(self, filename):
        assert validate_filename(filename) == (True, None)

    @pytest.mark.parametrize("filename", [
        "../../etc/passwd.pdf",
        "dir/contract.pdf",
        "dir\\contract.pdf",
        "..",
    ])
    def test_path_traversal(self, filename):
        is_valid, error = validate_filename(filename)
        assert is_valid is False
        assert "path traversal" in error

    def test_empty(self):
        assert validate_filename("   ")[0] is False
        assert validate_filename(None)[0] is False

    def test_too_long(self):
        assert validate_filename("a" * 252 + ".pdf")[0] is False

    def test_control_characters(self):
        assert validate_filename("con\x00tract.pdf")[0] is False
        assert validate_filename("con\ntract.pdf")[0] is False


class TestStorageNames:
    """Test object naming"""

    def test_sanitize_replaces_unsafe_characters(self):
        assert sanitize_filename("contract (copy).pdf") == "contract_copy_.pdf"

    def test_sanitize_strips_directories(self):
        assert sanitize_filename("/tmp/contract.pdf") == "contract.pdf"

    def test_build_storage_name_prefixes_epoch_millis(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert build_storage_name("q3 report.pdf", now) == "1735689600000-q3_report.pdf"

    def test_build_storage_name_differs_by_millisecond(self):
        first = datetime(2025, 1, 1, 0, 0, 0, 1000, tzinfo=timezone.utc)
        second = datetime(2025, 1, 1, 0, 0, 0, 2000, tzinfo=timezone.utc)
        assert build_storage_name("a.pdf", first) != build_storage_name("a.pdf", second)
