from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from domain.enums import Visibility
from domain.models import Meal
from domain.schemas.meal_schemas import MealCreate, MealSearchParams, MealUpdate
from repositories import MealRepository
from services.image_lifecycle_service import ImageLifecycleCoordinator
from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError

logger = logging.getLogger("meallog.meals")

EXPLORE_LIMIT = 50


class MealService:
    """Business logic for meal logs"""

    @staticmethod
    def check_image_ref(
        db: Session,
        image: Optional[str],
        lifecycle: ImageLifecycleCoordinator,
        meal_id: Optional[int] = None,
    ) -> None:
        """
        Ensure a meal may take ownership of an image path.

        The path must point into the blob store, the file must exist, and no
        other meal may already hold it.

        Raises:
            ServiceValidationError: If the path is foreign, missing or taken
        """
        if image is None:
            return

        store = lifecycle.store
        key = store.key_for(image)
        if key is None:
            raise ServiceValidationError(
                "Image must be a path returned by the upload endpoint",
                details={"image": image},
                code="INVALID_IMAGE_REF",
            )
        if not store.exists(key):
            raise ServiceValidationError(
                "Image file does not exist",
                details={"image": image},
                code="IMAGE_NOT_FOUND",
            )

        holder = MealRepository(db).get_by_image(image)
        if holder is not None and holder.meal_id != meal_id:
            raise ServiceValidationError(
                "Image is already attached to another meal",
                details={"image": image},
                code="IMAGE_IN_USE",
            )

    @staticmethod
    def create_meal(
        db: Session,
        user_id: int,
        data: MealCreate,
        lifecycle: ImageLifecycleCoordinator,
    ) -> Meal:
        MealService.check_image_ref(db, data.image, lifecycle)

        meal_repo = MealRepository(db)
        try:
            meal = meal_repo.add(Meal(user_id=user_id, **data.model_dump()))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error creating meal for user %s", user_id)
            raise
        db.refresh(meal)
        logger.info(f"meal_created meal_id={meal.meal_id} user_id={user_id}")
        return meal

    @staticmethod
    def list_meals(db: Session, user_id: int) -> List[Meal]:
        return MealRepository(db).get_by_user_id(user_id)

    @staticmethod
    def search_meals(db: Session, user_id: int, params: MealSearchParams) -> List[Meal]:
        meals = MealRepository(db).search(user_id, params)
        logger.info(f"meal_search user_id={user_id} results={len(meals)}")
        return meals

    @staticmethod
    def get_meal(db: Session, meal_id: int, viewer_id: Optional[int] = None) -> Meal:
        """
        Fetch a meal the viewer is allowed to see.

        Owners see everything, logged-in users see 'member' and 'all' meals,
        guests see 'all' meals only.

        Raises:
            NotFoundError: If the meal does not exist or is hidden from the viewer
        """
        meal = MealRepository(db).get_by_id(meal_id)
        if not meal:
            raise NotFoundError(f"Meal {meal_id} not found")
        if meal.user_id == viewer_id:
            return meal
        visible = {Visibility.ALL}
        if viewer_id is not None:
            visible.add(Visibility.MEMBER)
        if meal.visibility not in visible:
            raise NotFoundError(f"Meal {meal_id} not found")
        return meal

    @staticmethod
    def get_owned_meal(db: Session, meal_id: int, user_id: int) -> Meal:
        meal = MealRepository(db).get_by_id(meal_id)
        if not meal:
            raise NotFoundError(f"Meal {meal_id} not found")
        if meal.user_id != user_id:
            raise ForbiddenError("You can only change your own meals")
        return meal

    @staticmethod
    def explore(db: Session, viewer_id: Optional[int] = None) -> List[tuple]:
        """Return (meal, username) pairs visible in the shared feed"""
        if viewer_id is None:
            visibilities = [Visibility.ALL]
        else:
            visibilities = [Visibility.ALL, Visibility.MEMBER]
        return MealRepository(db).get_visible(visibilities, limit=EXPLORE_LIMIT)

    @staticmethod
    def update_meal(
        db: Session,
        meal_id: int,
        user_id: int,
        data: MealUpdate,
        lifecycle: ImageLifecycleCoordinator,
    ) -> Meal:
        """
        Replace a meal's fields, then release its previous photo if it changed.

        The old photo is only deleted once the new reference is committed; a
        failed commit rolls back and leaves every file in place.
        """
        meal = MealService.get_owned_meal(db, meal_id, user_id)
        old_image = meal.image
        if data.image != old_image:
            MealService.check_image_ref(db, data.image, lifecycle, meal_id=meal_id)

        try:
            for key, value in data.model_dump().items():
                setattr(meal, key, value)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error updating meal %s", meal_id)
            raise

        db.refresh(meal)
        logger.info(f"meal_updated meal_id={meal_id}")
        lifecycle.meal_image_replaced(old_image, meal.image)
        return meal

    @staticmethod
    def delete_meal(
        db: Session,
        meal_id: int,
        user_id: int,
        lifecycle: ImageLifecycleCoordinator,
    ) -> bool:
        """Delete a meal row, then its photo. Returns True if deleted."""
        meal = MealService.get_owned_meal(db, meal_id, user_id)
        image = meal.image

        try:
            MealRepository(db).remove(meal)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error deleting meal %s", meal_id)
            raise

        logger.info(f"meal_deleted meal_id={meal_id}")
        lifecycle.meal_deleted(image)
        return True
