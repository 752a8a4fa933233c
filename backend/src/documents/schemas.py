"""Document API request/response schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    """A document and its workflow state"""
    id: int
    document_name: str
    document_link: str = Field(..., description="Public download URL")
    uploaded_by: str
    upload_time: datetime
    approval_status: str = Field(..., description="Pending | Approved | Unapproved")
    approved_by: Optional[str] = None
    approval_time: Optional[datetime] = None
    review_status: str = Field(..., description="Pending | Approved | Rejected")
    reviewer: Optional[str] = None
    review_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApprovalRequest(BaseModel):
    approval_status: str = Field(..., description="Approved or Unapproved")
    approved_by: str = Field(..., min_length=1, description="Approver username")


class ApprovalResponse(BaseModel):
    message: str = "Approval status updated"
    document: DocumentResponse


class ReviewRequest(BaseModel):
    """Review decision for an uploader's Approved documents.

    Without document_id every Approved document of the uploader is reviewed.
    """
    uploaded_by: str = Field(..., min_length=1)
    review_status: str = Field(..., description="Approved or Rejected")
    reviewer: str = Field(..., min_length=1, description="Reviewer username")
    document_id: Optional[int] = Field(None, description="Review only this document")


class ReviewResponse(BaseModel):
    message: str = "Review status updated"
    updated: int = Field(..., description="Number of documents whose review status changed")
    documents: List[DocumentResponse]
