"""Document workflow engine.

Coordinates upload, approval and review of documents:

    upload  -> approval_status=Pending,  review_status=Pending
    approve -> approval_status=Approved|Unapproved (Unapproved resets review)
    review  -> review_status=Approved|Rejected on the uploader's Approved documents

Each state change is committed by the repository before any notification
is dispatched. Notification failures are logged and counted, never raised.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from auth.roles import UserRole, WorkflowAction, get_allowed_roles, has_permission
from domain.accounts import UserDirectoryPort
from domain.documents import (
    ApprovalStatus,
    ReviewStatus,
    build_storage_name,
    can_review,
    is_pdf_upload,
    parse_approval_decision,
    parse_review_decision,
    validate_file_size,
    validate_filename,
    MAX_FILE_SIZE,
)
from domain.documents.ports import (
    DocumentRecord,
    DocumentRepositoryPort,
    NewDocument,
    ObjectStoragePort,
    StoredFile,
)
from domain.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from domain.notifications import NotificationMessage, NotificationPort, templates
from models.base import utcnow
from observability import metrics
from .staging import StagedUpload

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class WorkflowEngine:
    """Applies workflow transitions and dispatches their notifications.

    Args:
        documents: Document persistence
        users: User lookups for actors and recipients
        storage: Object storage for uploaded files
        notifier: Outbound notification gateway
        approver_emails: Fixed approver recipients; falls back to users with the APPROVER role
        reviewer_emails: Fixed reviewer recipients; falls back to users with the REVIEWER role
        max_upload_size: Largest accepted upload in bytes
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        documents: DocumentRepositoryPort,
        users: UserDirectoryPort,
        storage: ObjectStoragePort,
        notifier: NotificationPort,
        approver_emails: Optional[List[str]] = None,
        reviewer_emails: Optional[List[str]] = None,
        max_upload_size: int = MAX_FILE_SIZE,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._documents = documents
        self._users = users
        self._storage = storage
        self._notifier = notifier
        self._role_emails: Dict[UserRole, List[str]] = {
            UserRole.APPROVER: list(approver_emails or []),
            UserRole.REVIEWER: list(reviewer_emails or []),
        }
        self._max_upload_size = max_upload_size
        self._clock = clock

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def submit_document(self, upload: StagedUpload, uploaded_by: str) -> DocumentRecord:
        """Store an uploaded PDF and record it as Pending.

        The staged copy is removed once the row is persisted. It is also
        removed when the upload is rejected or storage fails. If the row
        cannot be inserted the stored object is deleted; should that
        deletion fail too, the staged copy is kept for manual recovery.

        Raises:
            ValidationError: Missing uploader, bad filename, not a PDF, too large
            StorageError: Object store failed
        """
        uploaded_by = (uploaded_by or "").strip()
        try:
            self._validate_upload(upload, uploaded_by)
        except ValidationError:
            upload.discard()
            metrics.documents_uploaded_total.labels(outcome="rejected").inc()
            raise

        now = self._clock()
        storage_name = build_storage_name(upload.filename, now)
        stored = await self._store(upload, storage_name)

        try:
            document = self._documents.add(NewDocument(
                document_name=upload.filename,
                document_link=stored.public_url,
                storage_key=stored.storage_key,
                uploaded_by=uploaded_by,
                upload_time=now,
            ))
        except Exception:
            metrics.documents_uploaded_total.labels(outcome="persistence_error").inc()
            logger.error(
                f"Failed to record upload {storage_name}",
                exc_info=True,
                extra={"storage_key": stored.storage_key, "uploaded_by": uploaded_by},
            )
            if await self._remove_orphan(stored.storage_key):
                upload.discard()
            else:
                logger.error(
                    f"Staged upload retained at {upload.path}",
                    extra={"storage_key": stored.storage_key},
                )
            raise

        upload.discard()
        metrics.documents_uploaded_total.labels(outcome="stored").inc()
        logger.info(
            f"Document {document.id} uploaded by {uploaded_by}",
            extra={"document_id": document.id, "storage_key": stored.storage_key},
        )

        self._dispatch(templates.new_upload(
            recipients=self._role_recipients(UserRole.APPROVER),
            document_name=document.document_name,
            uploaded_by=uploaded_by,
            document_link=document.document_link,
        ))
        return document

    def _validate_upload(self, upload: StagedUpload, uploaded_by: str) -> None:
        if not uploaded_by:
            raise ValidationError("uploadedBy is required")

        is_valid, error = validate_filename(upload.filename)
        if not is_valid:
            raise ValidationError(error)

        if not is_pdf_upload(upload.filename, upload.content_type):
            raise ValidationError("Only PDF files are allowed")

        is_valid, error = validate_file_size(upload.size_bytes, self._max_upload_size)
        if not is_valid:
            raise ValidationError(error)

    async def _store(self, upload: StagedUpload, storage_name: str) -> StoredFile:
        stored: Optional[StoredFile] = None
        started = time.perf_counter()
        try:
            with upload.open() as stream:
                stored = await self._storage.store_file(stream, storage_name, PDF_CONTENT_TYPE)
            await self._storage.make_public(stored.storage_key)
        except Exception:
            metrics.documents_uploaded_total.labels(outcome="storage_error").inc()
            if stored is not None:
                await self._remove_orphan(stored.storage_key)
            upload.discard()
            raise
        finally:
            metrics.storage_upload_seconds.observe(time.perf_counter() - started)
        return stored

    async def _remove_orphan(self, storage_key: str) -> bool:
        try:
            await self._storage.delete_file(storage_key)
        except StorageError as e:
            logger.error(f"Failed to delete orphaned object {storage_key}: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    def decide_approval(self, document_id: int, decision: str, approved_by: str) -> DocumentRecord:
        """Record an approver's decision on one document.

        Approved notifies the uploader and the reviewers. Unapproved
        notifies the uploader and resets any earlier review.

        Raises:
            ValidationError: Decision is not Approved or Unapproved
            NotFoundError: Unknown document or approver
            PermissionDeniedError: Approver lacks the approve permission
        """
        status = parse_approval_decision(decision)
        if status is None:
            raise ValidationError("Status must be 'Approved' or 'Unapproved'")

        approved_by = self._require_actor(approved_by, WorkflowAction.APPROVE)

        document = self._documents.set_approval(document_id, status, approved_by, self._clock())
        if document is None:
            raise NotFoundError(f"Document {document_id} not found")

        metrics.approval_decisions_total.labels(decision=status.value).inc()
        logger.info(
            f"Document {document_id} marked {status.value} by {approved_by}",
            extra={"document_id": document_id, "approval_status": status.value},
        )

        uploader_email = self._uploader_email(document.uploaded_by)
        uploader = [uploader_email] if uploader_email else []

        if status == ApprovalStatus.APPROVED:
            self._dispatch(templates.approved_for_uploader(
                recipients=uploader,
                document_name=document.document_name,
                uploaded_by=document.uploaded_by,
            ))
            self._dispatch(templates.ready_for_review(
                recipients=self._role_recipients(UserRole.REVIEWER),
                document_name=document.document_name,
                uploaded_by=document.uploaded_by,
            ))
        else:
            self._dispatch(templates.status_update(
                recipients=uploader,
                document_name=document.document_name,
                uploaded_by=document.uploaded_by,
                status=status.value,
            ))

        return document

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    def review_uploader_documents(
        self,
        uploaded_by: str,
        decision: str,
        reviewer: str,
        document_id: Optional[int] = None,
    ) -> List[DocumentRecord]:
        """Record a reviewer's decision on an uploader's Approved documents.

        Without document_id every Approved document of the uploader is
        updated. With document_id only that document is, and it must
        belong to the uploader and be Approved. An update that touches no
        rows sends no notification.

        Raises:
            ValidationError: Decision is not Approved or Rejected, or no uploader given
            NotFoundError: Unknown reviewer, or document not owned by the uploader
            PermissionDeniedError: Reviewer lacks the review permission
            ConflictError: Targeted document is not Approved
        """
        status = parse_review_decision(decision)
        if status is None:
            raise ValidationError("Status must be 'Approved' or 'Rejected'")

        uploaded_by = (uploaded_by or "").strip()
        if not uploaded_by:
            raise ValidationError("uploadedBy is required")

        reviewer = self._require_actor(reviewer, WorkflowAction.REVIEW)
        scope = "uploader" if document_id is None else "document"

        if document_id is not None:
            document = self._documents.get(document_id)
            if document is None or document.uploaded_by != uploaded_by:
                raise NotFoundError(f"Document {document_id} not found for {uploaded_by}")
            if not can_review(ApprovalStatus(document.approval_status), status):
                raise ConflictError(
                    f"Document {document_id} must be Approved before review "
                    f"(current: {document.approval_status})"
                )

        updated = self._documents.set_review_for_uploader(
            uploaded_by, status, reviewer, self._clock(), document_id=document_id
        )
        metrics.review_decisions_total.labels(decision=status.value, scope=scope).inc()

        if not updated:
            if document_id is not None:
                # Approval changed between the read and the update
                raise ConflictError(f"Document {document_id} is no longer Approved")
            logger.info(f"No approved documents to review for {uploaded_by}")
            return []

        metrics.reviewed_documents_total.labels(decision=status.value).inc(len(updated))
        logger.info(
            f"{len(updated)} document(s) of {uploaded_by} reviewed as {status.value} by {reviewer}",
            extra={"document_ids": [doc.id for doc in updated], "review_status": status.value},
        )

        recipients = self._role_recipients(UserRole.APPROVER)
        uploader_email = self._uploader_email(uploaded_by)
        if uploader_email:
            recipients = [uploader_email] + recipients

        self._dispatch(templates.review_decision(
            recipients=_dedupe(recipients),
            uploaded_by=uploaded_by,
            reviewer=reviewer,
            status=status.value,
            document_names=[doc.document_name for doc in updated],
        ))
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_documents(self) -> List[DocumentRecord]:
        return self._documents.list_all()

    def list_documents_by_uploader(
        self, uploaded_by: Optional[str], partial: bool = False
    ) -> List[DocumentRecord]:
        """Documents of one uploader; every document when no uploader is given."""
        uploaded_by = (uploaded_by or "").strip()
        if not uploaded_by:
            return self._documents.list_all()
        return self._documents.list_by_uploader(uploaded_by, partial=partial)

    def list_approved_documents(self) -> List[DocumentRecord]:
        return self._documents.list_by_approval_status(ApprovalStatus.APPROVED)

    def get_document(self, document_id: int) -> DocumentRecord:
        document = self._documents.get(document_id)
        if document is None:
            raise NotFoundError(f"Document {document_id} not found")
        return document

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_actor(self, username: str, action: WorkflowAction) -> str:
        username = (username or "").strip()
        if not username:
            raise ValidationError(f"An actor is required to {action.value}")

        user = self._users.get_by_username(username)
        if user is None:
            raise NotFoundError(f"User {username} not found")

        try:
            role = UserRole(user.role)
        except ValueError:
            role = None
        if role is None or not has_permission(role, action):
            allowed = ", ".join(sorted(r.value for r in get_allowed_roles(action)))
            raise PermissionDeniedError(
                f"User {username} may not {action.value} documents (allowed roles: {allowed})"
            )
        return username

    def _role_recipients(self, role: UserRole) -> List[str]:
        configured = self._role_emails.get(role)
        if configured:
            return list(configured)
        return self._users.emails_for_role(role)

    def _uploader_email(self, uploaded_by: str) -> Optional[str]:
        try:
            return self._users.email_for(uploaded_by)
        except Exception as e:
            logger.warning(f"Could not resolve email for {uploaded_by}: {e}")
            return None

    def _dispatch(self, message: NotificationMessage) -> bool:
        if not message.recipients:
            metrics.notifications_total.labels(template=message.template, outcome="skipped").inc()
            logger.warning(f"Skipping {message.template} notification: no recipients")
            return False

        try:
            self._notifier.send(message)
        except Exception as e:
            metrics.notifications_total.labels(template=message.template, outcome="failed").inc()
            logger.error(
                f"Failed to send {message.template} notification: {e}",
                extra={"template": message.template, "recipient_count": len(message.recipients)},
            )
            return False

        metrics.notifications_total.labels(template=message.template, outcome="sent").inc()
        return True


def _dedupe(addresses: List[str]) -> List[str]:
    seen = set()
    result = []
    for address in addresses:
        key = address.lower()
        if key not in seen:
            seen.add(key)
            result.append(address)
    return result
