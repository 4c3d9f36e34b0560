"""
Meal Repository - Data access layer for meal logs
"""

from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import AppUser, Meal
from domain.schemas.meal_schemas import MealSearchParams


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def get_by_id(self, meal_id: int) -> Optional[Meal]:
        """Get meal by ID"""
        return self.db.query(Meal).filter(Meal.meal_id == meal_id).first()

    def get_by_user_id(self, user_id: int) -> List[Meal]:
        """Get all meals of a user, newest first"""
        return (
            self.db.query(Meal)
            .filter(Meal.user_id == user_id)
            .order_by(Meal.meal_date.desc(), Meal.meal_id.desc())
            .all()
        )

    def get_by_image(self, image: str) -> Optional[Meal]:
        """Get the meal that holds a stored image path, if any"""
        return self.db.query(Meal).filter(Meal.image == image).first()

    def get_image_refs_by_user_id(self, user_id: int) -> List[str]:
        """Get every non-null image path referenced by a user's meals"""
        rows = (
            self.db.query(Meal.image)
            .filter(Meal.user_id == user_id, Meal.image.isnot(None))
            .all()
        )
        return [image for (image,) in rows if image]

    def get_visible(self, visibilities: Iterable, limit: int = 50) -> List[tuple]:
        """Get (meal, username) pairs for the shared feed, newest first"""
        return (
            self.db.query(Meal, AppUser.username)
            .outerjoin(AppUser, Meal.user_id == AppUser.user_id)
            .filter(Meal.visibility.in_(list(visibilities)))
            .order_by(Meal.meal_date.desc(), Meal.meal_id.desc())
            .limit(limit)
            .all()
        )

    def delete_by_user_id(self, user_id: int) -> int:
        """Stage deletion of all meals for a user"""
        count = (
            self.db.query(Meal)
            .filter(Meal.user_id == user_id)
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return count

    def search(self, user_id: int, params: MealSearchParams) -> List[Meal]:
        """Filter a user's meals, newest first. Unset filters are ignored."""
        query = self.db.query(Meal).filter(Meal.user_id == user_id)

        if params.keyword:
            pattern = f"%{params.keyword}%"
            query = query.filter(
                or_(Meal.name.ilike(pattern), Meal.location.ilike(pattern))
            )
        if params.category:
            query = query.filter(Meal.category == params.category)
        if params.start_date:
            query = query.filter(
                Meal.meal_date >= datetime.combine(params.start_date, time.min)
            )
        if params.end_date:
            # whole end day is included
            next_day = datetime.combine(params.end_date + timedelta(days=1), time.min)
            query = query.filter(Meal.meal_date < next_day)
        if params.min_rating is not None:
            query = query.filter(Meal.rating >= params.min_rating)
        if params.max_rating is not None:
            query = query.filter(Meal.rating <= params.max_rating)
        if params.location:
            query = query.filter(Meal.location == params.location)

        return query.order_by(Meal.meal_date.desc(), Meal.meal_id.desc()).all()
