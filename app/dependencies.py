# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the image stores.
# These are injected into route handlers using Depends().
# =============================================================================

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services.storage_service import BlobImageStore, LocalFileStore


@lru_cache
def get_local_file_store() -> LocalFileStore:
    """
    Get the disk-backed image store.

    The uploads directory is created in the application lifespan.
    """
    return LocalFileStore(settings.UPLOADS_DIR)


@lru_cache
def get_blob_store() -> BlobImageStore:
    """Get the GridFS-backed image store."""
    return BlobImageStore(settings.IMAGES_BUCKET)


# Type aliases for dependency injection
LocalFileStoreDep = Annotated[LocalFileStore, Depends(get_local_file_store)]
BlobStoreDep = Annotated[BlobImageStore, Depends(get_blob_store)]
