"""Custom exceptions for the application."""


class PhotoStoreException(Exception):
    """Base exception for all marketplace errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(PhotoStoreException):
    """Raised when a resource or its file is not found."""

    def __init__(self, resource: str, identifier: str):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, status_code=404)


class ValidationException(PhotoStoreException):
    """Raised when a request or upload is rejected before any work is done."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, status_code=status_code)


class AccessDeniedException(PhotoStoreException):
    """Raised when the requester has no completed order for the item."""

    def __init__(self, item_type: str, identifier: str):
        message = f"No completed purchase of {item_type} '{identifier}'"
        super().__init__(message, status_code=403)


class StorageException(PhotoStoreException):
    """Raised when file storage operations fail."""

    def __init__(self, message: str):
        super().__init__(f"Storage error: {message}", status_code=500)


class DerivativeGenerationException(PhotoStoreException):
    """Raised when a thumbnail or watermarked copy cannot be produced."""

    def __init__(self, message: str):
        super().__init__(f"Image processing error: {message}", status_code=422)


class CoverGenerationException(PhotoStoreException):
    """Raised when an album cover cannot be produced."""

    def __init__(self, message: str):
        super().__init__(f"Cover generation error: {message}", status_code=400)
