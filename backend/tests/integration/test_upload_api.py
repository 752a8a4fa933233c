"""Integration tests for upload API

Tests the complete upload workflow:
- File upload with validation
- Storage integration (in-memory object store)
- Database record creation
- Approver notification
- Error handling
"""

import io

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from models.document import Document

from conftest import PDF_BYTES


pytestmark = pytest.mark.integration


def _post_upload(client, filename="contract.pdf", content=PDF_BYTES, content_type="application/pdf", uploaded_by="alice"):
    data = {"uploadedBy": uploaded_by} if uploaded_by is not None else {}
    return client.post(
        "/upload",
        files={"file": (filename, io.BytesIO(content), content_type)},
        data=data,
    )


class TestUploadAPI:
    """Integration tests for POST /upload"""

    def test_upload_pdf(self, client: TestClient, db_session: Session, storage, uploader, approver):
        response = _post_upload(client)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Document uploaded and saved"

        document = data["document"]
        assert document["document_name"] == "contract.pdf"
        assert document["uploaded_by"] == "alice"
        assert document["approval_status"] == "Pending"
        assert document["review_status"] == "Pending"
        assert document["approved_by"] is None
        assert document["document_link"].startswith("https://files.test/")

        row = db_session.execute(select(Document).where(Document.id == document["id"])).scalar_one()
        assert row.storage_key in storage.objects
        assert storage.objects[row.storage_key] == PDF_BYTES
        assert row.storage_key in storage.public

    def test_upload_notifies_approvers(self, client: TestClient, notifier, uploader, approver):
        response = _post_upload(client)

        assert response.status_code == 201
        assert notifier.templates() == ["new_upload"]
        assert notifier.sent[0].recipients == ["bob@example.com"]

    def test_upload_filename_with_consecutive_dots(self, client: TestClient, uploader):
        response = _post_upload(client, filename="Q3..final.pdf")

        assert response.status_code == 201
        assert response.json()["document"]["document_name"] == "Q3..final.pdf"

    def test_upload_cleans_staging_dir(self, client: TestClient, staging_dir, uploader):
        _post_upload(client)

        assert list(staging_dir.iterdir()) == []

    def test_upload_missing_uploader(self, client: TestClient, storage):
        response = _post_upload(client, uploaded_by=None)

        assert response.status_code == 400
        assert response.json() == {"error": "validation_error", "message": "uploadedBy is required"}
        assert storage.objects == {}

    def test_upload_non_pdf(self, client: TestClient, db_session: Session, storage):
        response = _post_upload(client, filename="notes.txt", content=b"hello", content_type="text/plain")

        assert response.status_code == 400
        assert response.json()["message"] == "Only PDF files are allowed"
        assert storage.objects == {}
        assert db_session.execute(select(Document)).scalars().all() == []

    def test_upload_pdf_extension_with_wrong_type(self, client: TestClient):
        response = _post_upload(client, content_type="image/png")

        assert response.status_code == 400

    def test_upload_empty_file(self, client: TestClient):
        response = _post_upload(client, content=b"")

        assert response.status_code == 400
        assert "empty" in response.json()["message"]

    def test_upload_too_large(self, client: TestClient, test_settings, storage):
        content = b"%" * (test_settings.MAX_UPLOAD_SIZE_BYTES + 1)

        response = _post_upload(client, content=content)

        assert response.status_code == 400
        assert "exceeds maximum size" in response.json()["message"]
        assert storage.objects == {}

    def test_upload_missing_file(self, client: TestClient):
        response = client.post("/upload", data={"uploadedBy": "alice"})

        assert response.status_code == 422

    def test_storage_failure(self, client: TestClient, db_session: Session, storage, staging_dir):
        storage.fail_store = True

        response = _post_upload(client)

        assert response.status_code == 500
        assert response.json() == {
            "error": "storage_error",
            "message": "Document storage failed. Please try again later.",
        }
        assert db_session.execute(select(Document)).scalars().all() == []
        assert list(staging_dir.iterdir()) == []

    def test_upload_response_carries_request_id(self, client: TestClient, uploader):
        response = _post_upload(client)

        assert response.headers.get("X-Request-ID")
