"""Custom exception classes for the OCR service."""


class OCRError(Exception):
    """Base exception for OCR service errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(OCRError):
    """Request rejected before any engine call."""
    pass


class InvalidImageError(InvalidInputError):
    """Invalid or corrupted image."""
    pass


class ImageTooLargeError(InvalidInputError):
    """Image exceeds size limit."""

    def __init__(self, size_bytes: int, max_bytes: int):
        super().__init__(
            f"Image size {size_bytes} bytes exceeds maximum {max_bytes} bytes",
            {"size_bytes": size_bytes, "max_bytes": max_bytes}
        )
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class InvalidRequestError(InvalidInputError):
    """Malformed OCR request structure."""
    pass


class InvalidOperationError(InvalidInputError):
    """Operation cannot be applied to the current image."""

    def __init__(self, operation: str, message: str, details: dict = None):
        super().__init__(message, {"operation": operation, **(details or {})})
        self.operation = operation


class EngineInitError(OCRError):
    """Local engine failed to load its model data."""
    pass


class EngineError(OCRError):
    """Error raised by a recognition engine for a single request."""
    pass


class LocalEngineError(EngineError):
    """Error from the local Tesseract engine."""
    pass


class RemoteOCRError(EngineError):
    """Error from the remote Google Lens engine."""
    pass


class RemoteTransportError(RemoteOCRError):
    """Non-success HTTP status or network failure."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        body: str = None,
        cause: Exception = None
    ):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        if body is not None:
            details["body"] = body
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body
        self.cause = cause


class RemoteDecodeError(RemoteOCRError):
    """Response did not match the expected schema."""
    pass
