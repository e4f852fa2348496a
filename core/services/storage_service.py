# =============================================================================
# core/services/storage_service.py - Image Storage Backends
# =============================================================================
# Two interchangeable places to keep product images:
# - LocalFileStore: files in the uploads directory, served under /uploads
# - BlobImageStore: chunked blobs in the MongoDB GridFS "images" bucket
#
# Both implement ImageStore.save(), which returns the ImageRef that the
# product record keeps. Routes pick the store explicitly.
# =============================================================================

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from bson import ObjectId
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from app.config import settings
from app.exceptions import BlobNotFoundError, BlobWriteError, LocalFileWriteError
from core.models.product import ImageKind, ImageRef
from lib.mongo_client import MongoClient
from lib.utils import build_stored_filename

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class ImageUpload:
    """An accepted upload, fully read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class BlobDownload:
    """An opened blob, ready to be streamed."""
    blob_id: str
    filename: str
    content_type: str
    length: int
    chunks: AsyncIterator[bytes]


class ImageStore(ABC):
    """Base class for image storage backends."""

    kind: ImageKind

    @abstractmethod
    async def save(self, upload: ImageUpload) -> ImageRef:
        """Persist the upload and return a reference to it."""


# =============================================================================
# Local File Store
# =============================================================================

class LocalFileStore(ImageStore):
    """
    Stores images as files in a single directory.

    The directory is created once by initialize() at application startup and
    must exist for the lifetime of the process.
    """

    kind = ImageKind.LOCAL_FILE

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def initialize(self) -> None:
        """Create the uploads directory if it is missing."""
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Uploads directory created: {self.directory}")

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    async def save(self, upload: ImageUpload) -> ImageRef:
        """
        Write the upload to a new file.

        Returns:
            ImageRef with the generated filename as locator

        Raises:
            LocalFileWriteError: If the file cannot be written
        """
        filename = build_stored_filename(upload.filename)
        path = self.path_for(filename)

        try:
            await asyncio.to_thread(path.write_bytes, upload.data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise LocalFileWriteError(filename, str(e))

        logger.info(f"Stored image on disk: {path} ({upload.size} bytes)")
        return ImageRef(kind=self.kind, locator=filename)

    def list_files(self, older_than: datetime | None = None) -> list[str]:
        """
        List stored filenames, used by the orphan sweep.

        With `older_than`, only files last modified before that instant are
        returned.
        """
        if not self.directory.exists():
            return []
        names = []
        for path in self.directory.iterdir():
            if not path.is_file():
                continue
            if older_than is not None:
                modified = datetime.fromtimestamp(path.stat().st_mtime, timezone.utc)
                if modified >= older_than:
                    continue
            names.append(path.name)
        return sorted(names)

    def delete(self, filename: str) -> bool:
        try:
            self.path_for(filename).unlink()
            logger.info(f"Deleted stored file: {filename}")
            return True
        except FileNotFoundError:
            return False


# =============================================================================
# Blob Store (GridFS)
# =============================================================================

class BlobImageStore(ImageStore):
    """
    Stores images inside MongoDB as GridFS blobs.

    The original filename is the GridFS filename; the content-type lives in
    the file metadata under `contentType`.
    """

    kind = ImageKind.BLOB

    def __init__(self, bucket_name: str | None = None):
        self.bucket_name = bucket_name or settings.IMAGES_BUCKET

    def _bucket(self):
        # Raises StorageUnavailableError when the database is not connected
        return MongoClient.get_bucket(self.bucket_name)

    async def save(self, upload: ImageUpload) -> ImageRef:
        """
        Write the upload through a GridFS upload stream.

        Returns:
            ImageRef with the generated blob id as locator

        Raises:
            StorageUnavailableError: If the database is not connected
            BlobWriteError: If the upload stream fails
        """
        bucket = self._bucket()
        grid_in = bucket.open_upload_stream(
            upload.filename,
            metadata={"contentType": upload.content_type},
        )

        try:
            await grid_in.write(upload.data)
            await grid_in.close()
        except PyMongoError as e:
            logger.error(f"GridFS upload failed for {upload.filename}: {e}")
            await grid_in.abort()
            raise BlobWriteError(upload.filename, str(e))

        blob_id = str(grid_in._id)
        logger.info(f"Stored image in bucket '{self.bucket_name}': {blob_id} ({upload.size} bytes)")
        return ImageRef(kind=self.kind, locator=blob_id)

    async def open_download(self, blob_id: ObjectId) -> BlobDownload:
        """
        Open a blob for streaming.

        The file document is resolved before any chunk is read, so a missing
        blob fails here and never mid-stream.

        Raises:
            StorageUnavailableError: If the database is not connected
            BlobNotFoundError: If no blob has this id
        """
        bucket = self._bucket()

        try:
            grid_out = await bucket.open_download_stream(blob_id)
        except NoFile:
            raise BlobNotFoundError(str(blob_id))

        metadata = grid_out.metadata or {}
        return BlobDownload(
            blob_id=str(blob_id),
            filename=grid_out.filename or "",
            content_type=metadata.get("contentType") or DEFAULT_CONTENT_TYPE,
            length=grid_out.length,
            chunks=self._iter_chunks(grid_out),
        )

    @staticmethod
    async def _iter_chunks(grid_out) -> AsyncIterator[bytes]:
        # Closed on exhaustion and when the consumer stops early
        try:
            while True:
                chunk = await grid_out.readchunk()
                if not chunk:
                    break
                yield chunk
        finally:
            await grid_out.close()

    async def list_ids(self, older_than: datetime | None = None) -> list[str]:
        """
        List blob ids in the bucket, used by the orphan sweep.

        With `older_than`, only blobs whose id was generated before that
        instant are returned.
        """
        cursor = self._bucket().find({})
        ids = [doc._id for doc in await cursor.to_list(None)]
        if older_than is not None:
            ids = [blob_id for blob_id in ids if blob_id.generation_time < older_than]
        return [str(blob_id) for blob_id in ids]

    async def delete(self, blob_id: str) -> bool:
        try:
            await self._bucket().delete(ObjectId(blob_id))
            logger.info(f"Deleted blob: {blob_id}")
            return True
        except NoFile:
            return False


# =============================================================================
# Upload Validation
# =============================================================================

def is_accepted_image_type(content_type: str | None) -> bool:
    """
    Check a declared content-type against the accepted image family.

    Accepts the wildcard `image/*` and any configured subtype.
    """
    if not content_type:
        return False
    # Drop parameters such as "; charset=binary"
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "image/*":
        return True
    family, _, subtype = media_type.partition("/")
    return family == "image" and subtype in settings.allowed_image_types_list
