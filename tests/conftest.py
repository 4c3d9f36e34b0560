"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and points the
application at throwaway storage before any app module is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLIC_ROOT", tempfile.mkdtemp(prefix="meallog-public-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator

from adapters.blob_store import LocalBlobStore
from domain.models import Base
from services.image_lifecycle_service import ImageLifecycleCoordinator


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create an isolated in-memory SQLite session for each test.

    Yields:
        Session: SQLAlchemy database session with all tables created
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def blob_store(tmp_path) -> LocalBlobStore:
    """Blob store rooted in the test's temporary directory"""
    return LocalBlobStore(tmp_path / "public" / "uploads" / "meals", "/uploads/meals")


@pytest.fixture(scope="function")
def lifecycle(blob_store) -> ImageLifecycleCoordinator:
    return ImageLifecycleCoordinator(blob_store)


@pytest.fixture(scope="function")
def api_client(db_session, blob_store) -> Generator[TestClient, None, None]:
    """TestClient wired to the test database session and blob store"""
    from main import app
    from api.dependencies import get_blob_store, get_db

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
