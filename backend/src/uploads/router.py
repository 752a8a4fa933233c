"""Upload API endpoint for ReviewFlow

Provides POST /upload for submitting a PDF into the approval workflow.
The file is staged to disk, validated, stored in object storage with a
public link, and recorded as a Pending document.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from starlette.concurrency import run_in_threadpool

from config import Settings, get_settings
from dependencies import get_workflow_engine
from documents.schemas import DocumentResponse
from workflow import WorkflowEngine, stage_bytes
from .schemas import UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: Annotated[UploadFile, File(...)],
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
    settings: Annotated[Settings, Depends(get_settings)],
    uploaded_by: Annotated[str, Form(alias="uploadedBy")] = "",
):
    """Upload one PDF for approval

    Accepts multipart/form-data with a `file` part and an `uploadedBy` field.

    Validation (before anything is stored):
    - uploadedBy present
    - Filename sanity checks
    - .pdf extension and PDF content type
    - File size (max 25MB by default, configurable via MAX_UPLOAD_SIZE_BYTES)

    Raises:
        ValidationError (400): Rejected upload
        StorageError (500): Object storage failed

    Example:
        curl -X POST http://localhost:8000/upload \\
          -F "file=@contract.pdf;type=application/pdf" \\
          -F "uploadedBy=alice"
    """
    # One byte past the limit is enough to reject an oversized file
    content = await file.read(settings.MAX_UPLOAD_SIZE_BYTES + 1)
    staged = await run_in_threadpool(
        stage_bytes,
        content,
        file.filename or "",
        file.content_type,
        settings.UPLOAD_STAGING_DIR,
    )

    document = await engine.submit_document(staged, uploaded_by)
    return UploadResponse(document=DocumentResponse.model_validate(document))
