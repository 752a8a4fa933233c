"""Message templates for workflow notifications.

Each builder returns a NotificationMessage with both an HTML and a plain
text body. User-supplied values are HTML-escaped.
"""

from html import escape
from typing import List

from .ports import NotificationMessage

NEW_UPLOAD = "new_upload"
APPROVED_FOR_UPLOADER = "approved_for_uploader"
READY_FOR_REVIEW = "ready_for_review"
STATUS_UPDATE = "status_update"
REVIEW_DECISION = "review_decision"
OTP_CODE = "otp_code"


def new_upload(
    recipients: List[str],
    document_name: str,
    uploaded_by: str,
    document_link: str,
) -> NotificationMessage:
    """Tell approvers a document is waiting for them."""
    return NotificationMessage(
        recipients=recipients,
        subject="New Document Uploaded for Review",
        html=(
            "<h3>A new document has been uploaded.</h3>"
            f"<p><strong>Uploaded By:</strong> {escape(uploaded_by)}</p>"
            f"<p><strong>Document:</strong> {escape(document_name)}</p>"
            f'<p><strong>Link:</strong> <a href="{escape(document_link)}">Download PDF</a></p>'
        ),
        text=(
            "A new document has been uploaded.\n"
            f"Uploaded By: {uploaded_by}\n"
            f"Document: {document_name}\n"
            f"Link: {document_link}\n"
        ),
        template=NEW_UPLOAD,
    )


def approved_for_uploader(
    recipients: List[str],
    document_name: str,
    uploaded_by: str,
) -> NotificationMessage:
    """Tell the uploader their document was approved and now awaits review."""
    return NotificationMessage(
        recipients=recipients,
        subject=f'Your document "{document_name}" has been approved',
        html=(
            "<h3>Good news!</h3>"
            f"<p>Your document <strong>{escape(document_name)}</strong> uploaded by "
            f"<strong>{escape(uploaded_by)}</strong> has been approved by the approver.</p>"
            "<p>It will now be reviewed by the reviewer.</p>"
        ),
        text=(
            f"Your document {document_name} uploaded by {uploaded_by} "
            "has been approved by the approver.\n"
            "It will now be reviewed by the reviewer.\n"
        ),
        template=APPROVED_FOR_UPLOADER,
    )


def ready_for_review(
    recipients: List[str],
    document_name: str,
    uploaded_by: str,
) -> NotificationMessage:
    """Tell reviewers an approved document is in their queue."""
    return NotificationMessage(
        recipients=recipients,
        subject=f'New Document "{document_name}" Needs Your Review',
        html=(
            "<h3>Document Ready for Review</h3>"
            f"<p>A new document <strong>{escape(document_name)}</strong> uploaded by "
            f"<strong>{escape(uploaded_by)}</strong> has been approved and is ready for your review.</p>"
            "<p>Please log in to the system and take necessary action.</p>"
        ),
        text=(
            f"A new document {document_name} uploaded by {uploaded_by} "
            "has been approved and is ready for your review.\n"
            "Please log in to the system and take necessary action.\n"
        ),
        template=READY_FOR_REVIEW,
    )


def status_update(
    recipients: List[str],
    document_name: str,
    uploaded_by: str,
    status: str,
) -> NotificationMessage:
    """Generic status change, used for Unapproved decisions."""
    return NotificationMessage(
        recipients=recipients,
        subject=f'Document "{document_name}" Status: {status}',
        html=(
            "<h3>Document Status Update</h3>"
            f"<p><strong>{escape(document_name)}</strong> uploaded by "
            f"<strong>{escape(uploaded_by)}</strong> is now marked as: "
            f"<strong>{escape(status)}</strong>.</p>"
        ),
        text=f"{document_name} uploaded by {uploaded_by} is now marked as: {status}.\n",
        template=STATUS_UPDATE,
    )


def review_decision(
    recipients: List[str],
    uploaded_by: str,
    reviewer: str,
    status: str,
    document_names: List[str],
) -> NotificationMessage:
    """Tell the uploader and approvers how the reviewer decided."""
    if status == "Approved":
        subject = "Document Reviewed & Approved"
    else:
        subject = "Document Reviewed & Rejected"

    items = "".join(f"<li>{escape(name)}</li>" for name in document_names)
    return NotificationMessage(
        recipients=recipients,
        subject=subject,
        html=(
            f"<h3>Document reviewed by: {escape(reviewer)}</h3>"
            f"<p><strong>Status:</strong> {escape(status)}</p>"
            f"<p><strong>Uploaded By:</strong> {escape(uploaded_by)}</p>"
            f"<ul>{items}</ul>"
        ),
        text=(
            f"Document reviewed by: {reviewer}\n"
            f"Status: {status}\n"
            f"Uploaded By: {uploaded_by}\n"
            + "".join(f"- {name}\n" for name in document_names)
        ),
        template=REVIEW_DECISION,
    )


def otp_code(recipient: str, code: str, ttl_seconds: int) -> NotificationMessage:
    """Deliver a one-time passcode."""
    minutes = max(1, ttl_seconds // 60)
    return NotificationMessage(
        recipients=[recipient],
        subject="Your OTP Code",
        html=f"<p>Your OTP is: <strong>{escape(code)}</strong></p><p>It expires in {minutes} minutes.</p>",
        text=f"Your OTP is: {code}\nIt expires in {minutes} minutes.\n",
        template=OTP_CODE,
    )
