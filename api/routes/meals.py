"""Meal log routes"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from api.dependencies import (
    get_current_user_id,
    get_db,
    get_lifecycle_coordinator,
    get_optional_user_id,
)
from domain.schemas.meal_schemas import (
    ExploreMealResponse,
    MealCreate,
    MealResponse,
    MealSearchParams,
    MealSearchResponse,
    MealUpdate,
)
from services.image_lifecycle_service import ImageLifecycleCoordinator
from services.meal_service import MealService

router = APIRouter(prefix="/meals", tags=["Meals"])
explore_router = APIRouter(tags=["Explore"])
logger = logging.getLogger("meallog.api.meals")


@router.post("", response_model=MealResponse, status_code=status.HTTP_201_CREATED)
def create_meal(
    meal: MealCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: ImageLifecycleCoordinator = Depends(get_lifecycle_coordinator),
):
    """Log a new meal for the current user"""
    return MealService.create_meal(db, user_id, meal, lifecycle)


@router.get("", response_model=List[MealResponse])
def list_meals(
    user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)
):
    """Return the current user's meals, newest first"""
    return MealService.list_meals(db, user_id)


@router.get("/search", response_model=MealSearchResponse)
def search_meals(
    keyword: Optional[str] = Query(None, description="Matches name or location"),
    category: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, description="First day included"),
    end_date: Optional[date] = Query(None, description="Last day included"),
    min_rating: Optional[float] = Query(None),
    max_rating: Optional[float] = Query(None),
    location: Optional[str] = Query(None, description="Exact location"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Search the current user's meals, newest first"""
    params = MealSearchParams(
        keyword=keyword,
        category=category,
        start_date=start_date,
        end_date=end_date,
        min_rating=min_rating,
        max_rating=max_rating,
        location=location,
    )
    results = MealService.search_meals(db, user_id, params)
    return MealSearchResponse(
        count=len(results),
        results=[MealResponse.model_validate(meal) for meal in results],
    )


@router.get("/{meal_id}", response_model=MealResponse)
def get_meal(
    meal_id: int,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Get a single meal if the caller may see it"""
    return MealService.get_meal(db, meal_id, viewer_id)


@router.put("/{meal_id}", response_model=MealResponse)
def update_meal(
    meal_id: int,
    meal: MealUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: ImageLifecycleCoordinator = Depends(get_lifecycle_coordinator),
):
    """Replace a meal's fields; a replaced photo is removed from storage"""
    return MealService.update_meal(db, meal_id, user_id, meal, lifecycle)


@router.delete("/{meal_id}")
def delete_meal(
    meal_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: ImageLifecycleCoordinator = Depends(get_lifecycle_coordinator),
):
    """Delete a meal and its photo"""
    MealService.delete_meal(db, meal_id, user_id, lifecycle)
    return {"success": True, "message": "Meal deleted", "deleted": meal_id}


@explore_router.get("/explore", response_model=List[ExploreMealResponse])
def explore(
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Shared feed: public meals for guests, public and member meals for users"""
    rows = MealService.explore(db, viewer_id)
    return [
        ExploreMealResponse.model_validate(meal).model_copy(update={"username": username})
        for meal, username in rows
    ]
