"""Pytest fixtures for docshelf tests.

Provides reusable test fixtures for:
- In-memory SQLite database session (fresh schema per test)
- Test users (alice owns documents, bob and carol receive shares)
- In-memory blob store and scripted classifier fakes
- Document factory that writes both the record and its blob
- FastAPI TestClient with storage/queue overrides and JWT helpers

Usage:
    def test_owner_can_publish(client, alice, make_document, auth_headers):
        document = make_document(alice)
        response = client.post(f"/api/v1/documents/{document.id}/make-public",
                               headers=auth_headers(alice))
        assert response.status_code == 200
"""

import os

# Set environment variables BEFORE any docshelf imports (settings are read at import time)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("APP_URL", "https://docs.example.test")

from typing import AsyncIterator, Callable, Dict, Generator, List, Optional, Tuple
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from docshelf.analysis.analyzer import DocumentAnalyzer
from docshelf.auth.jwt import create_access_token
from docshelf.database import get_db
from docshelf.domain.ai.ports import (
    ClassifierAttachment,
    ClassifierResponse,
    DocumentClassifierPort,
    LLMError,
)
from docshelf.domain.documents.ports.object_storage_port import (
    BlobStorePort,
    StorageError,
    StoredBlob,
    build_storage_path,
)
from docshelf.domain.documents.visibility import Visibility
from docshelf.models import Base, Document, User
from docshelf.services.document_service import DocumentService

TEST_DISK = "test-bucket"


# =============================================================================
# FAKES
# =============================================================================

class InMemoryBlobStore(BlobStorePort):
    """Dict-backed BlobStorePort.

    Set fail_reads / fail_deletes to make the corresponding calls raise StorageError.
    """

    def __init__(self, disk: str = TEST_DISK):
        self._disk = disk
        self.blobs: Dict[str, Tuple[bytes, str]] = {}
        self.fail_reads = False
        self.fail_deletes = False

    @property
    def disk(self) -> str:
        return self._disk

    async def put(self, path: str, data: bytes, mime_type: str = "application/octet-stream") -> StoredBlob:
        if not data:
            raise ValueError("Cannot store empty file")
        self.blobs[path] = (data, mime_type)
        return StoredBlob(disk=self._disk, path=path, size_bytes=len(data), mime_type=mime_type)

    async def get(self, path: str) -> bytes:
        if self.fail_reads:
            raise StorageError("simulated read failure")
        if path not in self.blobs:
            raise FileNotFoundError(path)
        return self.blobs[path][0]

    async def exists(self, path: str) -> bool:
        return path in self.blobs

    async def delete(self, path: str) -> bool:
        if self.fail_deletes:
            raise StorageError("simulated delete failure")
        return self.blobs.pop(path, None) is not None

    async def stream(self, path: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        if path not in self.blobs:
            raise FileNotFoundError(path)
        data = self.blobs[path][0]
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]


class FakeClassifier(DocumentClassifierPort):
    """Scripted classifier.

    Each call pops the next scripted item: a dict becomes parsed JSON, None is a
    malformed (unparseable) response, an exception instance is raised. When the
    script is exhausted the default payload is returned.
    """

    def __init__(self, default: Optional[dict] = None):
        self.default = default if default is not None else {
            "title": "AI Title",
            "description": "AI description.",
            "tags": ["ai", "notes"],
            "summary": "AI summary.",
            "sensitivity": "safe",
        }
        self.script: List[object] = []
        self.calls: List[Tuple[str, Optional[ClassifierAttachment]]] = []

    def respond_with(self, *items) -> "FakeClassifier":
        self.script.extend(items)
        return self

    def classify(self, prompt: str, attachment: Optional[ClassifierAttachment] = None) -> ClassifierResponse:
        self.calls.append((prompt, attachment))
        item = self.script.pop(0) if self.script else self.default

        if isinstance(item, LLMError):
            raise item

        return ClassifierResponse(
            raw_output="" if item is None else str(item),
            parsed_json=item,
            provider="fake",
            model="fake-model",
            latency_ms=5,
            warnings=[] if item is not None else ["Failed to parse LLM JSON output"],
        )


class EnqueueRecorder:
    """Stand-in for the task queue: records (document_id, force_update) pairs."""

    def __init__(self):
        self.calls: List[Tuple[UUID, bool]] = []

    def __call__(self, document_id: UUID, force_update: bool = False) -> None:
        self.calls.append((document_id, force_update))


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite engine with the full schema."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Database session for one test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# USERS & DOCUMENTS
# =============================================================================

def _create_user(db_session: Session, email: str, name: str) -> User:
    user = User(email=email, name=name)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def alice(db_session: Session) -> User:
    """Document owner."""
    return _create_user(db_session, "alice@example.com", "Alice")


@pytest.fixture
def bob(db_session: Session) -> User:
    return _create_user(db_session, "bob@example.com", "Bob")


@pytest.fixture
def carol(db_session: Session) -> User:
    return _create_user(db_session, "carol@example.com", "Carol")


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def analyzer(classifier: FakeClassifier, blob_store: InMemoryBlobStore) -> DocumentAnalyzer:
    return DocumentAnalyzer(classifier=classifier, storage=blob_store)


@pytest.fixture
def enqueue_recorder() -> EnqueueRecorder:
    return EnqueueRecorder()


@pytest.fixture
def document_service(db_session, blob_store, enqueue_recorder) -> DocumentService:
    return DocumentService(
        session=db_session,
        storage=blob_store,
        enqueue_analysis=enqueue_recorder,
    )


@pytest.fixture
def make_document(db_session: Session, blob_store: InMemoryBlobStore) -> Callable[..., Document]:
    """Factory persisting a Document (and, unless with_blob=False, its blob).

    Example:
        document = make_document(alice, original_name="notes.md", content=b"# Notes")
    """

    def _make(
        owner: User,
        original_name: str = "notes.md",
        mime_type: str = "text/markdown",
        content: bytes = b"# Meeting notes\n\nDiscussed the Q3 roadmap.",
        with_blob: bool = True,
        **fields,
    ) -> Document:
        path = build_storage_path(owner.id, original_name)
        if with_blob:
            blob_store.blobs[path] = (content, mime_type)

        fields.setdefault("visibility", Visibility.PRIVATE)
        fields.setdefault("ai_analyzed", False)
        document = Document(
            user_id=owner.id,
            original_name=original_name,
            mime_type=mime_type,
            size_bytes=len(content),
            storage_disk=blob_store.disk,
            storage_path=path,
            **fields,
        )
        db_session.add(document)
        db_session.commit()
        return document

    return _make


# =============================================================================
# HTTP CLIENT
# =============================================================================

@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build an Authorization header for a user."""

    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(user_id=user.id, email=user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(db_session: Session, blob_store: InMemoryBlobStore, enqueue_recorder: EnqueueRecorder):
    """TestClient with the database, blob store and task queue overridden."""
    from docshelf.dependencies import get_enqueue_analysis, get_storage
    from docshelf.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: blob_store
    app.dependency_overrides[get_enqueue_analysis] = lambda: enqueue_recorder

    yield TestClient(app)

    app.dependency_overrides.clear()
