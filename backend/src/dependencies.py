"""Global FastAPI dependencies wiring the workflow to its adapters.

This module provides:
- Repositories bound to the request's database session
- Process-wide object storage, notification gateway and OTP store
- The WorkflowEngine, OTPService and AccountService used by the routers

Tests replace the process-wide pieces with app.dependency_overrides.
"""

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from auth.otp import OTPService, OTPStore, build_otp_store
from auth.service import AccountService
from config import Settings, get_settings
from database import get_db
from domain.documents.ports import ObjectStoragePort
from domain.notifications import NotificationPort, RecordingNotifier
from infrastructure.notifications.queued_gateway import QueuedNotificationGateway
from infrastructure.notifications.smtp_gateway import SMTPGateway
from infrastructure.redis_client import get_redis_client
from infrastructure.repositories import SqlAlchemyDocumentRepository, SqlAlchemyUserRepository
from infrastructure.storage import S3StorageAdapter, storage_config_from_settings
from workflow import WorkflowEngine

logger = logging.getLogger(__name__)


def get_document_repository(db: Session = Depends(get_db)) -> SqlAlchemyDocumentRepository:
    return SqlAlchemyDocumentRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(db)


@lru_cache()
def get_object_storage() -> ObjectStoragePort:
    return S3StorageAdapter.from_config(storage_config_from_settings(get_settings()))


@lru_cache()
def get_notifier() -> NotificationPort:
    """Notification gateway selected by NOTIFICATION_MODE.

    celery: queue for the worker (default)
    smtp:   send directly from the API process
    memory: keep messages in memory (local development)
    """
    settings = get_settings()
    mode = settings.NOTIFICATION_MODE.lower()
    if mode == "smtp":
        return SMTPGateway.from_settings(settings)
    if mode == "memory":
        logger.warning("NOTIFICATION_MODE=memory: notifications are not delivered")
        return RecordingNotifier()
    if mode != "celery":
        raise ValueError(f"Unknown NOTIFICATION_MODE: {settings.NOTIFICATION_MODE}")
    return QueuedNotificationGateway()


@lru_cache()
def get_otp_store() -> OTPStore:
    return build_otp_store(get_redis_client(get_settings().REDIS_URL))


def get_workflow_engine(
    documents: SqlAlchemyDocumentRepository = Depends(get_document_repository),
    users: SqlAlchemyUserRepository = Depends(get_user_repository),
    storage: ObjectStoragePort = Depends(get_object_storage),
    notifier: NotificationPort = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> WorkflowEngine:
    return WorkflowEngine(
        documents=documents,
        users=users,
        storage=storage,
        notifier=notifier,
        approver_emails=settings.approver_emails,
        reviewer_emails=settings.reviewer_emails,
        max_upload_size=settings.MAX_UPLOAD_SIZE_BYTES,
    )


def get_otp_service(
    store: OTPStore = Depends(get_otp_store),
    users: SqlAlchemyUserRepository = Depends(get_user_repository),
    notifier: NotificationPort = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> OTPService:
    return OTPService(store=store, users=users, notifier=notifier, ttl_seconds=settings.OTP_TTL_SECONDS)


def get_account_service(
    users: SqlAlchemyUserRepository = Depends(get_user_repository),
) -> AccountService:
    return AccountService(users)
