from typing import Iterable, Optional
import logging

from adapters.blob_store import LocalBlobStore
from app.config import Settings, settings as app_settings
from app.exceptions import (
    InvalidImageError,
    PayloadTooLargeError,
    UnsupportedTypeError,
)
from domain.schemas.image_schemas import UploadRequest
from services.filename_allocator import (
    file_extension,
    generate_storage_key,
    replace_extension,
)
from services.image_transcoder import (
    ImageDecodeError,
    ImageTranscoder,
    OUTPUT_EXTENSION,
)

logger = logging.getLogger("meallog.ingestion")


class ImageIngestionService:
    """Validate an uploaded photo, compress it, and put it in the blob store."""

    def __init__(
        self,
        store: LocalBlobStore,
        transcoder: Optional[ImageTranscoder] = None,
        max_upload_bytes: int = 10 * 1024 * 1024,
        allowed_extensions: Iterable[str] = (".jpg", ".jpeg", ".png", ".webp"),
    ):
        self.store = store
        self.transcoder = transcoder or ImageTranscoder()
        self.max_upload_bytes = max_upload_bytes
        self.allowed_extensions = frozenset(
            ext.lower().lstrip(".") for ext in allowed_extensions
        )

    @classmethod
    def from_settings(
        cls, store: LocalBlobStore, config: Optional[Settings] = None
    ) -> "ImageIngestionService":
        config = config or app_settings
        return cls(
            store=store,
            transcoder=ImageTranscoder.from_settings(config),
            max_upload_bytes=config.upload_max_bytes,
            allowed_extensions=config.upload_allowed_extensions,
        )

    def validate(self, upload: UploadRequest) -> None:
        """
        Reject uploads by extension and raw size before any decoding.

        Raises:
            UnsupportedTypeError: If the filename has no accepted extension
            PayloadTooLargeError: If the raw bytes exceed the upload ceiling
        """
        self.validate_declared(upload.filename, upload.size)

    def validate_declared(self, filename: str, size: Optional[int]) -> None:
        """Same checks as validate() from a filename and a declared size,
        so an oversized body can be refused before it is read.

        An unknown size (None) skips the size check.
        """
        if not filename:
            raise UnsupportedTypeError("Invalid filename")

        ext = file_extension(filename)
        if ext not in self.allowed_extensions:
            raise UnsupportedTypeError(
                details={
                    "filename": filename,
                    "allowed": sorted(f".{e}" for e in self.allowed_extensions),
                }
            )

        if size is not None and size > self.max_upload_bytes:
            raise PayloadTooLargeError(
                f"File size must not exceed {self.max_upload_bytes // (1024 * 1024)} MB",
                details={"size": size, "max_size": self.max_upload_bytes},
            )

    def ingest(self, upload: UploadRequest) -> str:
        """
        Store an uploaded image and return its public path.

        The returned path is the only thing a meal record should persist; if
        this method raises, nothing was written and nothing should be saved.

        Raises:
            UnsupportedTypeError, PayloadTooLargeError: on validation failure
            InvalidImageError: If the bytes cannot be decoded as an image
            StorageWriteError: If the processed file cannot be written
        """
        logger.info(
            "Upload received filename=%s type=%s bytes=%.2fKB",
            upload.filename,
            upload.content_type,
            upload.size / 1024,
        )
        self.validate(upload)

        try:
            result = self.transcoder.transcode(upload.data)
        except ImageDecodeError as exc:
            logger.warning("Rejected undecodable upload %s: %s", upload.filename, exc)
            raise InvalidImageError(details={"filename": upload.filename}) from exc

        # The stored bytes are always JPEG, so the key carries the JPEG extension
        key = generate_storage_key(replace_extension(upload.filename, OUTPUT_EXTENSION))
        path = self.store.put(key, result.data)

        logger.info(
            "Upload stored path=%s bytes=%.2fKB quality=%d",
            path,
            result.size / 1024,
            result.quality,
        )
        return path
