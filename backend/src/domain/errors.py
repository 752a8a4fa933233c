"""Workflow error taxonomy.

Every error raised by the workflow core derives from WorkflowError and
carries the HTTP status and machine-readable code the API layer reports.
Server-side failures (status >= 500) expose a generic client message.
"""


class WorkflowError(Exception):
    """Base class for errors surfaced by workflow operations."""
    status_code = 400
    code = "workflow_error"
    public_message = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def client_message(self) -> str:
        """Message safe to return to API clients."""
        return self.public_message or self.message


class ValidationError(WorkflowError):
    """Bad file type, missing or malformed field."""
    status_code = 400
    code = "validation_error"


class NotFoundError(WorkflowError):
    """Unknown document id or username."""
    status_code = 404
    code = "not_found"


class ConflictError(WorkflowError):
    """Duplicate account data or a transition the current state forbids."""
    status_code = 409
    code = "conflict"


class AuthError(WorkflowError):
    """Bad credentials."""
    status_code = 401
    code = "auth_error"


class PermissionDeniedError(AuthError):
    """Actor's role may not perform the requested transition."""
    status_code = 403
    code = "permission_denied"


class InvalidCodeError(AuthError):
    """One-time passcode missing, expired or wrong."""
    status_code = 400
    code = "invalid_otp"


class MismatchError(AuthError):
    """Username and email do not belong to the same user."""
    status_code = 400
    code = "mismatch"


class RateLimitedError(WorkflowError):
    """Too many attempts from one client."""
    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str = "", retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class StorageError(WorkflowError):
    """Object store rejected or failed an operation."""
    status_code = 500
    code = "storage_error"
    public_message = "Document storage failed. Please try again later."


class TransientNotifyError(WorkflowError):
    """Mail dispatch failed. Logged by the engine, never surfaced."""
    status_code = 502
    code = "notification_error"
    public_message = "Notification could not be delivered."


class OTPDeliveryError(WorkflowError):
    """Passcode could not be handed to the mail relay."""
    status_code = 500
    code = "otp_delivery_failed"
    public_message = "Failed to send OTP"
