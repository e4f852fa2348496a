# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .product_service import ProductService
from .storage_service import (
    BlobDownload,
    BlobImageStore,
    ImageStore,
    ImageUpload,
    LocalFileStore,
    is_accepted_image_type,
)
from .orphan_service import OrphanService, SweepReport

__all__ = [
    "ProductService",
    "BlobDownload",
    "BlobImageStore",
    "ImageStore",
    "ImageUpload",
    "LocalFileStore",
    "is_accepted_image_type",
    "OrphanService",
    "SweepReport",
]
