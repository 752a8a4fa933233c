"""Celery application for background notification delivery.

Usage:
    celery -A workers.celery_app worker --loglevel=info -Q notifications
"""

from celery import Celery

from config import get_settings

settings = get_settings()

celery_app = Celery(
    "reviewflow",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["workers.notification_tasks"],
)

celery_app.conf.task_routes = {
    "notifications.send_email": {"queue": "notifications"},
}

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_ignore_result=True,
    task_soft_time_limit=60,
    broker_connection_retry_on_startup=True,
)
