"""Document API endpoints for ReviewFlow

Listings for uploaders, approvers and reviewers, plus the approval and
review transitions.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_workflow_engine
from workflow import WorkflowEngine
from .schemas import (
    ApprovalRequest,
    ApprovalResponse,
    DocumentResponse,
    ReviewRequest,
    ReviewResponse,
)

router = APIRouter(tags=["Documents"])

Engine = Annotated[WorkflowEngine, Depends(get_workflow_engine)]


@router.get("/api/documents", response_model=List[DocumentResponse])
def list_documents(engine: Engine):
    """All documents, newest first."""
    return engine.list_documents()


@router.get("/api/document", response_model=List[DocumentResponse])
def search_documents_by_uploader(
    engine: Engine,
    uploaded_by: Optional[str] = Query(None, description="Substring of the uploader username"),
):
    """Documents whose uploader contains the given text; all documents without a filter."""
    return engine.list_documents_by_uploader(uploaded_by, partial=True)


@router.get("/api/documents/{document_id}", response_model=DocumentResponse)
def get_document(document_id: int, engine: Engine):
    """One document.

    Raises:
        NotFoundError (404): Unknown id
    """
    return engine.get_document(document_id)


@router.get("/documents", response_model=List[DocumentResponse])
def list_documents_by_uploader(
    engine: Engine,
    uploaded_by: Optional[str] = Query(None, alias="uploadedBy"),
):
    """Documents of exactly one uploader; all documents without a filter."""
    return engine.list_documents_by_uploader(uploaded_by, partial=False)


@router.get("/api/approved-documents", response_model=List[DocumentResponse])
def list_approved_documents(engine: Engine):
    """Reviewer queue: Approved documents, newest first."""
    return engine.list_approved_documents()


@router.put("/api/approve/{document_id}", response_model=ApprovalResponse)
def approve_document(document_id: int, body: ApprovalRequest, engine: Engine):
    """Record an approval decision.

    Approved notifies the uploader and reviewers; Unapproved notifies the
    uploader and clears any earlier review.

    Raises:
        ValidationError (400): Decision is not Approved or Unapproved
        PermissionDeniedError (403): approved_by may not approve
        NotFoundError (404): Unknown document or approver
    """
    document = engine.decide_approval(document_id, body.approval_status, body.approved_by)
    return ApprovalResponse(document=DocumentResponse.model_validate(document))


@router.put("/api/review", response_model=ReviewResponse)
def review_documents(body: ReviewRequest, engine: Engine):
    """Record a review decision on an uploader's Approved documents.

    Raises:
        ValidationError (400): Decision is not Approved or Rejected
        PermissionDeniedError (403): reviewer may not review
        NotFoundError (404): Unknown reviewer, or document not owned by the uploader
        ConflictError (409): Targeted document is not Approved
    """
    documents = engine.review_uploader_documents(
        uploaded_by=body.uploaded_by,
        decision=body.review_status,
        reviewer=body.reviewer,
        document_id=body.document_id,
    )
    return ReviewResponse(
        updated=len(documents),
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
    )
