"""Services package - Business logic layer"""

from services.image_transcoder import ImageTranscoder, TranscoderConfig
from services.image_ingestion_service import ImageIngestionService
from services.image_lifecycle_service import ImageLifecycleCoordinator
from services.meal_service import MealService
from services.user_service import UserService

__all__ = [
    "ImageTranscoder",
    "TranscoderConfig",
    "ImageIngestionService",
    "ImageLifecycleCoordinator",
    "MealService",
    "UserService",
]
