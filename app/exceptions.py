# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a code and, where possible, a suggestion on how to fix it.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CatalogException(Exception):
    """
    Base exception for the catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CATALOG_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(CatalogException):
    """Raised when required form fields are missing or malformed."""

    def __init__(self, message: str, fields: list[str]):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion="Send name (non-empty) and price (a number >= 0) as form fields",
            details={"fields": fields}
        )

    @classmethod
    def missing(cls, fields: list[str]) -> "ValidationError":
        return cls(f"Missing required field(s): {', '.join(fields)}", fields)


class InvalidIdentifierError(CatalogException):
    """Raised when a path id is not a valid database identifier."""

    def __init__(self, value: str):
        super().__init__(
            message=f"Invalid id: {value}",
            code="INVALID_IDENTIFIER",
            status_code=400,
            suggestion="Ids are 24-character hexadecimal strings",
            details={"id": value}
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class UnsupportedMediaError(CatalogException):
    """Raised when an uploaded file is not an accepted image type."""

    def __init__(self, content_type: str | None, allowed: list[str]):
        super().__init__(
            message=f"Only images are allowed. Received content-type: {content_type}",
            code="UNSUPPORTED_MEDIA_TYPE",
            status_code=415,
            suggestion=f"Upload one of: {', '.join('image/' + t for t in allowed)}",
            details={"content_type": content_type, "allowed_types": allowed}
        )


class PayloadTooLargeError(CatalogException):
    """Raised when an uploaded file exceeds the size limit."""

    def __init__(self, max_mb: int):
        super().__init__(
            message=f"File too large (max: {max_mb}MB)",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload an image smaller than {max_mb}MB",
            details={"max_mb": max_mb}
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageUnavailableError(CatalogException):
    """Raised when the database connection is not ready."""

    def __init__(self):
        super().__init__(
            message="DB not ready",
            code="STORAGE_UNAVAILABLE",
            status_code=500,
            suggestion="Check MONGODB_URI and that MongoDB is reachable, then restart the API",
        )


class BlobWriteError(CatalogException):
    """Raised when writing an image into the blob bucket fails."""

    def __init__(self, filename: str, error: str):
        super().__init__(
            message=f"Failed to store image in database: {error}",
            code="BLOB_WRITE_ERROR",
            status_code=500,
            suggestion="Try again later or use POST /api/products for disk storage",
            details={"filename": filename, "error": error}
        )


class LocalFileWriteError(CatalogException):
    """Raised when writing an image to the uploads directory fails."""

    def __init__(self, filename: str, error: str):
        super().__init__(
            message=f"Failed to write image to disk: {error}",
            code="LOCAL_FILE_WRITE_ERROR",
            status_code=500,
            suggestion="Check that UPLOADS_DIR exists and is writable",
            details={"filename": filename, "error": error}
        )


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ProductNotFoundError(CatalogException):
    """Raised when a product ID doesn't exist."""

    def __init__(self, product_id: str):
        super().__init__(
            message="Not found",
            code="PRODUCT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the product id is correct and the product wasn't deleted",
            details={"product_id": product_id}
        )


class BlobNotFoundError(CatalogException):
    """Raised when no stored image matches a blob id."""

    def __init__(self, blob_id: str):
        super().__init__(
            message="Not found",
            code="BLOB_NOT_FOUND",
            status_code=404,
            details={"blob_id": blob_id}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def catalog_exception_handler(
    request: Request,
    exc: CatalogException
) -> JSONResponse:
    """
    Convert CatalogException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unexpected_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle anything that is not a CatalogException.

    The raw error message is returned to the caller.
    """
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "code": "INTERNAL_ERROR",
        }
    )
