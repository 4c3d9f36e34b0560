"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    MealResponse,
    ExploreMealResponse,
    MealSearchParams,
    MealSearchResponse,
)
from domain.schemas.image_schemas import UploadRequest, UploadResponse
from domain.schemas.user_schemas import UserDeletedResponse, UserResponse

__all__ = [
    "MealCreate",
    "MealUpdate",
    "MealResponse",
    "ExploreMealResponse",
    "MealSearchParams",
    "MealSearchResponse",
    "UploadRequest",
    "UploadResponse",
    "UserDeletedResponse",
    "UserResponse",
]
