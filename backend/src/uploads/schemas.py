"""Upload API response schemas"""

from pydantic import BaseModel, Field

from documents.schemas import DocumentResponse


class UploadResponse(BaseModel):
    """Response for a stored upload"""
    success: bool = True
    message: str = Field("Document uploaded and saved", description="Human readable result")
    document: DocumentResponse
