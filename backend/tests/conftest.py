"""Shared pytest fixtures.

Provides:
- An in-memory SQLite database (StaticPool) with all tables created per test
- Repositories, a fake object store and a recording notifier
- A WorkflowEngine wired to those fakes
- A TestClient with every external dependency overridden

Usage:
    def test_upload(client, uploader):
        response = client.post("/upload", files=..., data={"uploadedBy": uploader.username})
        assert response.status_code == 201
"""

import hashlib
import os
import sys
import tempfile
from pathlib import Path
from typing import BinaryIO, Dict, Generator, Optional

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_PEPPER"] = "test-pepper-secret-key-32-chars-long"
os.environ["NOTIFICATION_MODE"] = "memory"
os.environ["LOG_JSON"] = "false"
os.environ["APPROVER_EMAILS"] = ""
os.environ["REVIEWER_EMAILS"] = ""
os.environ["UPLOAD_STAGING_DIR"] = os.path.join(tempfile.gettempdir(), "reviewflow-test-staging")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config import Settings, get_settings

get_settings.cache_clear()

from auth.otp import InMemoryOTPStore
from auth.password import hash_password
from auth.rate_limit import RateLimiter, get_rate_limiter
from auth.roles import UserRole
from database import get_db
from domain.documents.ports import ObjectStoragePort, StoredFile
from domain.errors import StorageError
from domain.notifications import RecordingNotifier
from infrastructure.repositories import SqlAlchemyDocumentRepository, SqlAlchemyUserRepository
from models import Admin, Base, User
from workflow import WorkflowEngine, stage_bytes

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"
TEST_PASSWORD = "correct horse battery staple"


class FakeObjectStorage(ObjectStoragePort):
    """In-memory object store with switchable failures."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.public = set()
        self.fail_store = False
        self.fail_make_public = False
        self.fail_delete = False

    async def store_file(self, file: BinaryIO, storage_name: str, mime_type: str) -> StoredFile:
        if self.fail_store:
            raise StorageError("quota exceeded")
        content = file.read()
        key = f"test/{storage_name}"
        self.objects[key] = content
        return StoredFile(
            storage_key=key,
            public_url=f"https://files.test/{key}",
            sha256=hashlib.sha256(content).hexdigest(),
            size_bytes=len(content),
            mime_type=mime_type,
        )

    async def make_public(self, storage_key: str) -> None:
        if self.fail_make_public:
            raise StorageError("acl denied")
        self.public.add(storage_key)

    async def delete_file(self, storage_key: str) -> bool:
        if self.fail_delete:
            raise StorageError("delete denied")
        self.public.discard(storage_key)
        return self.objects.pop(storage_key, None) is not None

    async def file_exists(self, storage_key: str) -> bool:
        return storage_key in self.objects

    async def verify_bucket_exists(self) -> bool:
        return True


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def document_repo(db_session) -> SqlAlchemyDocumentRepository:
    return SqlAlchemyDocumentRepository(db_session)


@pytest.fixture
def user_repo(db_session) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(db_session)


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    directory = tmp_path / "staging"
    directory.mkdir()
    return directory


@pytest.fixture
def make_user(db_session):
    """Factory creating a user with a hashed password."""
    def _make_user(username: str, role: UserRole = UserRole.UPLOADER, email: Optional[str] = None) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password=hash_password(TEST_PASSWORD),
            role=role.value,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def uploader(make_user) -> User:
    return make_user("alice", UserRole.UPLOADER)


@pytest.fixture
def approver(make_user) -> User:
    return make_user("bob", UserRole.APPROVER)


@pytest.fixture
def reviewer(make_user) -> User:
    return make_user("carol", UserRole.REVIEWER)


@pytest.fixture
def admin_account(db_session) -> Admin:
    admin = Admin(username="root", password=hash_password(TEST_PASSWORD))
    db_session.add(admin)
    db_session.commit()
    return admin


@pytest.fixture
def stage(staging_dir):
    """Factory staging upload bytes the way the upload route does."""
    def _stage(content: bytes = PDF_BYTES, filename: str = "contract.pdf", content_type: Optional[str] = "application/pdf"):
        return stage_bytes(content, filename, content_type, str(staging_dir))
    return _stage


@pytest.fixture
def workflow(document_repo, user_repo, storage, notifier) -> WorkflowEngine:
    return WorkflowEngine(
        documents=document_repo,
        users=user_repo,
        storage=storage,
        notifier=notifier,
        max_upload_size=1024 * 1024,
    )


@pytest.fixture
def test_settings(staging_dir) -> Settings:
    return Settings(
        UPLOAD_STAGING_DIR=str(staging_dir),
        MAX_UPLOAD_SIZE_BYTES=1024 * 1024,
        NOTIFICATION_MODE="memory",
    )


@pytest.fixture
def otp_store() -> InMemoryOTPStore:
    return InMemoryOTPStore()


@pytest.fixture
def client(db_session, storage, notifier, otp_store, test_settings) -> Generator[TestClient, None, None]:
    """TestClient with database, storage, notifier, OTP store and rate limiter overridden."""
    from main import app
    from dependencies import get_notifier, get_object_storage, get_otp_store

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_storage] = lambda: storage
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_rate_limiter] = lambda: RateLimiter(redis=None)
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
