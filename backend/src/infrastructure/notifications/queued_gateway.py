"""Celery-backed notification gateway.

Publishes messages to the notifications queue so the request thread never
waits on the mail relay. Delivery and retries happen in the worker.
"""

import logging

from kombu.exceptions import OperationalError

from domain.errors import TransientNotifyError
from domain.notifications import NotificationMessage, NotificationPort
from workers.notification_tasks import send_email

logger = logging.getLogger(__name__)

# Publishing gives up quickly when the broker is down
PUBLISH_RETRY_POLICY = {
    "max_retries": 2,
    "interval_start": 0,
    "interval_step": 0.5,
    "interval_max": 1,
}


class QueuedNotificationGateway(NotificationPort):
    """Enqueue notifications for the Celery worker."""

    def send(self, message: NotificationMessage) -> None:
        """Enqueue a message.

        Raises:
            TransientNotifyError: If the message is invalid or the broker is unreachable
        """
        try:
            message.validate()
        except ValueError as e:
            raise TransientNotifyError(f"Invalid message: {e}")

        try:
            result = send_email.apply_async(
                args=[message.to_payload()],
                retry=True,
                retry_policy=PUBLISH_RETRY_POLICY,
            )
        except OperationalError as e:
            logger.error(f"Failed to enqueue {message.template} notification: {e}")
            raise TransientNotifyError(f"Notification queue unavailable: {e}")

        logger.info(
            f"Queued {message.template} notification",
            extra={"template": message.template, "task_id": result.id},
        )
