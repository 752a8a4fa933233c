"""User roles and workflow permissions for ReviewFlow.

Roles:
- UPLOADER: Submits documents and follows their status
- APPROVER: Approves or unapproves submitted documents
- REVIEWER: Performs the secondary review of approved documents
- ADMIN: May perform every workflow action

Permission Matrix:
┌──────────────────┬──────────┬──────────┬──────────┬───────┐
│ Action           │ UPLOADER │ APPROVER │ REVIEWER │ ADMIN │
├──────────────────┼──────────┼──────────┼──────────┼───────┤
│ Approve document │          │    ✓     │          │   ✓   │
│ Review documents │          │          │    ✓     │   ✓   │
└──────────────────┴──────────┴──────────┴──────────┴───────┘
"""

from enum import Enum
from typing import Set


class UserRole(str, Enum):
    """User roles in ReviewFlow.

    Values are stored as TEXT in the database and must match exactly.
    """
    UPLOADER = "UPLOADER"
    APPROVER = "APPROVER"
    REVIEWER = "REVIEWER"
    ADMIN = "ADMIN"


class WorkflowAction(str, Enum):
    """Workflow transitions that are restricted by role."""
    APPROVE = "APPROVE"
    REVIEW = "REVIEW"


ROLE_PERMISSIONS = {
    UserRole.UPLOADER: set(),
    UserRole.APPROVER: {WorkflowAction.APPROVE},
    UserRole.REVIEWER: {WorkflowAction.REVIEW},
    UserRole.ADMIN: {WorkflowAction.APPROVE, WorkflowAction.REVIEW},
}


def has_permission(user_role: UserRole, action: WorkflowAction) -> bool:
    """Check if a user role may perform a workflow action.

    Examples:
        >>> has_permission(UserRole.ADMIN, WorkflowAction.REVIEW)
        True
        >>> has_permission(UserRole.REVIEWER, WorkflowAction.APPROVE)
        False
    """
    return action in ROLE_PERMISSIONS.get(user_role, set())


def get_allowed_roles(action: WorkflowAction) -> Set[UserRole]:
    """Get all roles that may perform an action.

    Example:
        >>> sorted(r.value for r in get_allowed_roles(WorkflowAction.APPROVE))
        ['ADMIN', 'APPROVER']
    """
    return {role for role, actions in ROLE_PERMISSIONS.items() if action in actions}
