"""Meal photo upload route"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
import logging

from api.dependencies import get_current_user_id, get_ingestion_service
from app.exceptions import ServiceValidationError
from domain.schemas.image_schemas import UploadRequest, UploadResponse
from services.image_ingestion_service import ImageIngestionService

router = APIRouter(tags=["Uploads"])
logger = logging.getLogger("meallog.api.upload")


@router.post("/upload", response_model=UploadResponse)
def upload_image(
    file: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user_id),
    ingestion: ImageIngestionService = Depends(get_ingestion_service),
):
    """Store a meal photo and return the path to put on a meal's image field."""
    if file is None:
        raise ServiceValidationError("No file uploaded", code="NO_FILE")

    filename = file.filename or ""
    ingestion.validate_declared(filename, file.size)

    # never buffer more than one byte past the limit
    data = file.file.read(ingestion.max_upload_bytes + 1)
    upload = UploadRequest(
        filename=filename,
        data=data,
        content_type=file.content_type,
        content_length=file.size,
    )
    path = ingestion.ingest(upload)
    logger.info(f"upload_stored user_id={user_id} path={path}")
    return UploadResponse(success=True, path=path, message="Upload successful")
