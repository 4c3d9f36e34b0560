"""Admin user management routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging
from typing import List

from api.dependencies import get_db, get_lifecycle_coordinator, require_admin
from domain.schemas.user_schemas import UserDeletedResponse, UserResponse
from services.image_lifecycle_service import ImageLifecycleCoordinator
from services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = logging.getLogger("meallog.api.admin")


@router.get("/users", response_model=List[UserResponse])
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin_id: int = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List accounts without any credential fields"""
    return UserService.list_users(db, skip=skip, limit=limit)


@router.delete("/users/{user_id}", response_model=UserDeletedResponse)
def delete_user(
    user_id: int,
    admin_id: int = Depends(require_admin),
    db: Session = Depends(get_db),
    lifecycle: ImageLifecycleCoordinator = Depends(get_lifecycle_coordinator),
):
    """Delete a user together with all of their meals and photos."""
    result = UserService.delete_user(db, user_id, admin_id, lifecycle)
    logger.info(f"admin_deleted_user admin_id={admin_id} user_id={user_id}")
    return result
