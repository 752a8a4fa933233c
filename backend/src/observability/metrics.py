"""Prometheus metrics for ReviewFlow.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Upload metrics
documents_uploaded_total = Counter(
    "reviewflow_documents_uploaded_total",
    "Total upload attempts by outcome",
    ["outcome"]  # outcome: stored|rejected|storage_error|persistence_error
)

storage_upload_seconds = Histogram(
    "reviewflow_storage_upload_seconds",
    "Time spent storing a document in object storage in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Workflow transition metrics
approval_decisions_total = Counter(
    "reviewflow_approval_decisions_total",
    "Total approval decisions recorded",
    ["decision"]  # decision: Approved|Unapproved
)

review_decisions_total = Counter(
    "reviewflow_review_decisions_total",
    "Total review requests handled",
    ["decision", "scope"]  # scope: uploader|document
)

reviewed_documents_total = Counter(
    "reviewflow_reviewed_documents_total",
    "Total documents whose review status changed",
    ["decision"]
)

# Notification metrics
notifications_total = Counter(
    "reviewflow_notifications_total",
    "Total notifications by template and outcome",
    ["template", "outcome"]  # outcome: sent|failed|skipped
)

# One-time passcode metrics
otp_events_total = Counter(
    "reviewflow_otp_events_total",
    "Total OTP requests and verifications by outcome",
    ["event", "outcome"]  # event: request|verify
)

# Authentication metrics
login_attempts_total = Counter(
    "reviewflow_login_attempts_total",
    "Total login attempts by surface and outcome",
    ["surface", "outcome"]  # surface: user|admin, outcome: success|failure
)

# HTTP metrics
http_requests_total = Counter(
    "reviewflow_http_requests_total",
    "Total HTTP requests by method and status code",
    ["method", "status_code"]
)
