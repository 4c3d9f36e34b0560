from typing import Any, Mapping, Optional


class ServiceValidationError(Exception):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers (400)
    """

    http_status = 400
    default_code: Optional[str] = None

    def __init__(self, message: str = "Invalid input", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class UnsupportedTypeError(ServiceValidationError):
    """Raised when an upload's filename extension is not an accepted image type."""

    default_code = "UNSUPPORTED_TYPE"

    def __init__(self, message: str = "Only JPG, PNG and WEBP images are supported", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class PayloadTooLargeError(ServiceValidationError):
    """Raised when the raw upload exceeds the pre-transcode size ceiling."""

    default_code = "PAYLOAD_TOO_LARGE"

    def __init__(self, message: str = "File size must not exceed 10 MB", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class InvalidImageError(ServiceValidationError):
    """Raised when an upload cannot be decoded as an image."""

    default_code = "INVALID_IMAGE"

    def __init__(self, message: str = "The file is not a readable image", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details, code)


class StorageWriteError(Exception):
    """Raised when a processed image cannot be written to the blob store.

    Treated as a server fault: http_status is 500 and the upload is not retried.
    """

    http_status = 500

    def __init__(self, message: str = "Failed to store image", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = "STORAGE_WRITE_ERROR"):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class NotFoundError(Exception):
    """Raised when a requested resource was not found.

    Attributes are similar to ServiceValidationError. http_status is 404.
    """

    http_status = 404

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(Exception):
    """Raised when no valid session identifies the caller.

    Attributes are similar to ServiceValidationError. http_status is 401.
    """

    http_status = 401

    def __init__(self, message: str = "Not logged in", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ForbiddenError(Exception):
    """Raised when the caller is known but not allowed to perform the operation.

    Attributes are similar to ServiceValidationError. http_status is 403.
    """

    http_status = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message
