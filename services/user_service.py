from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from domain.enums import UserRole
from domain.models import AppUser
from domain.schemas.user_schemas import UserDeletedResponse
from repositories import MealRepository, UserRepository
from services.image_lifecycle_service import ImageLifecycleCoordinator
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("meallog.users")


class UserService:
    """Business logic for user accounts"""

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[AppUser]:
        return UserRepository(db).get_by_id(user_id)

    @staticmethod
    def list_users(db: Session, skip: int = 0, limit: int = 100) -> List[AppUser]:
        return UserRepository(db).get_all(skip=skip, limit=limit)

    @staticmethod
    def create_user(
        db: Session, username: str, role: UserRole = UserRole.USER
    ) -> AppUser:
        user_repo = UserRepository(db)
        if user_repo.get_by_username(username):
            raise ServiceValidationError(f"User {username} already exists")
        try:
            user = user_repo.create_user(username, role)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error creating user %s", username)
            raise
        db.refresh(user)
        logger.info(f"user_created user_id={user.user_id}")
        return user

    @staticmethod
    def delete_user(
        db: Session,
        user_id: int,
        acting_user_id: int,
        lifecycle: ImageLifecycleCoordinator,
    ) -> UserDeletedResponse:
        """
        Delete a user, all of their meals, and every photo those meals held.

        Steps:
        1. Refuse to delete the acting admin's own account
        2. Collect image paths of all the user's meals
        3. Delete meal rows and the user row in one transaction
        4. After commit, release the collected images (best effort)

        Raises:
            ServiceValidationError: If an admin tries to delete themselves
            NotFoundError: If the user does not exist
        """
        if user_id == acting_user_id:
            raise ServiceValidationError("You cannot delete your own admin account")

        user_repo = UserRepository(db)
        meal_repo = MealRepository(db)

        if not user_repo.get_by_id(user_id):
            raise NotFoundError(f"User {user_id} not found")

        image_refs = meal_repo.get_image_refs_by_user_id(user_id)

        try:
            meals_deleted = meal_repo.delete_by_user_id(user_id)
            user_repo.delete_user(user_id)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error deleting user %s", user_id)
            raise

        logger.info(f"user_deleted user_id={user_id} meals_deleted={meals_deleted}")
        report = lifecycle.user_deleted(image_refs)

        return UserDeletedResponse(
            deleted=user_id,
            meals_deleted=meals_deleted,
            images_released=report.released,
        )
