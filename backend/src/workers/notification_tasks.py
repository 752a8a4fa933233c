"""Notification delivery worker.

Receives queued NotificationMessage payloads and sends them over SMTP.
Transient relay failures are retried with exponential backoff.
"""

import logging
from typing import Any, Dict

from celery import shared_task

from config import get_settings
from domain.errors import TransientNotifyError
from domain.notifications import NotificationMessage
from infrastructure.notifications.smtp_gateway import SMTPGateway
from observability import metrics
from .celery_app import celery_app  # noqa: F401  registers the app for shared_task

logger = logging.getLogger(__name__)

MAX_RETRIES = 3


@shared_task(name="notifications.send_email", bind=True, max_retries=MAX_RETRIES)
def send_email(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Deliver one queued notification.

    Args:
        payload: NotificationMessage.to_payload() output

    Returns:
        Dict with delivery status
    """
    message = NotificationMessage.from_payload(payload)
    gateway = SMTPGateway.from_settings(get_settings())

    try:
        gateway.send(message)
    except TransientNotifyError as e:
        if self.request.retries >= MAX_RETRIES:
            metrics.notifications_total.labels(template=message.template, outcome="failed").inc()
            logger.error(
                f"Giving up on {message.template} notification after {self.request.retries} retries: {e}"
            )
            return {"status": "failed", "template": message.template, "error": str(e)}

        logger.warning(f"Retrying {message.template} notification: {e}")
        raise self.retry(exc=e, countdown=2 ** self.request.retries * 30)

    return {"status": "sent", "template": message.template, "recipients": len(message.recipients)}
