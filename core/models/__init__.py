# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# - product.py: Product input/output schemas and the tagged ImageRef
#
# These models define the "contract" between API and clients.
# =============================================================================

from .product import (
    BLOB_URL_PREFIX,
    UPLOADS_URL_PREFIX,
    ImageKind,
    ImageRef,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

__all__ = [
    "BLOB_URL_PREFIX",
    "UPLOADS_URL_PREFIX",
    "ImageKind",
    "ImageRef",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
]
