"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    ServiceValidationError,
    UnsupportedTypeError,
    PayloadTooLargeError,
    InvalidImageError,
    StorageWriteError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
)

__all__ = [
    "settings",
    "ServiceValidationError",
    "UnsupportedTypeError",
    "PayloadTooLargeError",
    "InvalidImageError",
    "StorageWriteError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
]
