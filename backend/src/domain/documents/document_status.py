"""Approval and review status state machine for documents

Two status fields move independently but review is gated on approval:

    approval_status: Pending -> Approved | Unapproved (re-decidable)
    review_status:   Pending -> Approved | Rejected   (only while Approved)
"""

from enum import Enum
from typing import Optional


class ApprovalStatus(str, Enum):
    """Decision recorded by the approver role"""
    PENDING = "Pending"
    APPROVED = "Approved"
    UNAPPROVED = "Unapproved"


class ReviewStatus(str, Enum):
    """Decision recorded by the reviewer role"""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


APPROVAL_DECISIONS = (ApprovalStatus.APPROVED, ApprovalStatus.UNAPPROVED)
REVIEW_DECISIONS = (ReviewStatus.APPROVED, ReviewStatus.REJECTED)


def can_review(approval_status: ApprovalStatus, to_status: ReviewStatus) -> bool:
    """Check whether a review decision may be recorded

    Review is gated on approval: only Approved documents can carry a
    non-Pending review status.

    Example:
        >>> can_review(ApprovalStatus.APPROVED, ReviewStatus.REJECTED)
        True
        >>> can_review(ApprovalStatus.PENDING, ReviewStatus.APPROVED)
        False
    """
    if to_status == ReviewStatus.PENDING:
        return True
    return approval_status == ApprovalStatus.APPROVED


def parse_approval_decision(value: str) -> Optional[ApprovalStatus]:
    """Map a client-supplied decision onto an approval decision, or None"""
    try:
        status = ApprovalStatus(value)
    except ValueError:
        return None
    return status if status in APPROVAL_DECISIONS else None


def parse_review_decision(value: str) -> Optional[ReviewStatus]:
    """Map a client-supplied decision onto a review decision, or None"""
    try:
        status = ReviewStatus(value)
    except ValueError:
        return None
    return status if status in REVIEW_DECISIONS else None
