"""Workflow module - upload, approval and review of documents"""

from .engine import WorkflowEngine
from .staging import StagedUpload, stage_bytes

__all__ = ["WorkflowEngine", "StagedUpload", "stage_bytes"]
