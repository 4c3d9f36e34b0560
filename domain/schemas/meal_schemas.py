from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from domain.enums import Visibility


class MealCreate(BaseModel):
    """Schema for logging a new meal"""

    name: str = Field(..., min_length=1, description="Name of the dish or meal")
    meal_date: datetime = Field(..., description="When the meal was eaten")
    category: Optional[str] = Field(
        None, description="Free-form category (e.g., 'breakfast', 'takeaway')"
    )
    location: Optional[str] = None
    rating: Optional[float] = Field(None, description="Score, e.g. 4.5")
    rating_notes: Optional[str] = None
    remarks: Optional[str] = None
    image: Optional[str] = Field(
        None, description="Path returned by POST /upload, or null for no photo"
    )
    visibility: Visibility = Field(default=Visibility.PRIVATE)


class MealUpdate(MealCreate):
    """Schema for replacing a meal's fields.

    The image field follows the same rule as every other field: the value
    sent becomes the stored value, so null removes the photo.
    """


class MealResponse(BaseModel):
    """Schema for meal response"""

    meal_id: int
    user_id: int
    name: str
    meal_date: datetime
    category: Optional[str]
    location: Optional[str]
    rating: Optional[float]
    rating_notes: Optional[str]
    remarks: Optional[str]
    image: Optional[str]
    visibility: Visibility
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ExploreMealResponse(MealResponse):
    """Meal as shown in the shared feed, with its owner's name"""

    username: Optional[str] = None


class MealSearchParams(BaseModel):
    """Filters for searching the current user's meals"""

    keyword: Optional[str] = Field(
        None, description="Substring matched against name or location"
    )
    category: Optional[str] = None
    start_date: Optional[date] = Field(None, description="First day included")
    end_date: Optional[date] = Field(None, description="Last day included")
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    location: Optional[str] = Field(None, description="Exact location match")


class MealSearchResponse(BaseModel):
    """Schema for meal search results"""

    success: bool = True
    count: int
    results: List[MealResponse]
