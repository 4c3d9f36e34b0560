"""
API dependencies for dependency injection
"""

from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from adapters.blob_store import LocalBlobStore
from app.exceptions import ForbiddenError, UnauthorizedError
from domain.models import get_db_session
from repositories import UserRepository
from services.image_ingestion_service import ImageIngestionService
from services.image_lifecycle_service import ImageLifecycleCoordinator

SESSION_COOKIE = "user_id"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


@lru_cache(maxsize=1)
def get_blob_store() -> LocalBlobStore:
    """Process-wide blob store built from settings (override in tests)"""
    return LocalBlobStore.from_settings()


def get_ingestion_service(
    store: LocalBlobStore = Depends(get_blob_store),
) -> ImageIngestionService:
    return ImageIngestionService.from_settings(store)


def get_lifecycle_coordinator(
    store: LocalBlobStore = Depends(get_blob_store),
) -> ImageLifecycleCoordinator:
    return ImageLifecycleCoordinator(store)


def get_optional_user_id(request: Request) -> Optional[int]:
    """Read the session cookie; None when absent or malformed"""
    raw = request.cookies.get(SESSION_COOKIE)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def get_current_user_id(user_id: Optional[int] = Depends(get_optional_user_id)) -> int:
    """Require a logged-in caller"""
    if user_id is None:
        raise UnauthorizedError("Not logged in, please log in first")
    return user_id


def require_admin(
    user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)
) -> int:
    """Require the caller to hold the admin role; returns their user id"""
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedError("Session user no longer exists")
    if not user.is_admin:
        raise ForbiddenError("Admin privileges required")
    return user_id
