# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - In-memory doubles for the products collection and the GridFS bucket,
#   installed into MongoClient so no MongoDB server is needed
# - A TestClient for the FastAPI app
# =============================================================================

import copy
import os
import tempfile
from types import SimpleNamespace
from typing import Any

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

# Always a scratch directory: the uploads_dir fixture empties it
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="catalog-uploads-")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from gridfs.errors import NoFile
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from app.config import settings
from app.dependencies import get_local_file_store
from app.main import app
from lib.mongo_client import MongoClient

# Small chunks so multi-chunk streaming is exercised with small payloads
TEST_CHUNK_SIZE = 64 * 1024


# =============================================================================
# Collection Double
# =============================================================================

def _get_path(doc: dict[str, Any], dotted: str) -> Any:
    value: Any = doc
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _matches(doc: dict[str, Any], query: dict[str, Any] | None) -> bool:
    return all(_get_path(doc, key) == expected for key, expected in (query or {}).items())


class FakeCursor:
    """Supports the sort().to_list() chain used by the services."""

    def __init__(self, items: list[Any]):
        self._items = items

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._items.sort(key=lambda d: d[key], reverse=direction == DESCENDING)
        return self

    async def to_list(self, length: int | None = None) -> list[Any]:
        return list(self._items if length is None else self._items[:length])


class FakeCollection:
    """Dict-backed stand-in for an async pymongo collection."""

    def __init__(self):
        self.docs: dict[ObjectId, dict[str, Any]] = {}

    def _find(self, query):
        return [doc for doc in self.docs.values() if _matches(doc, query)]

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self._find(query)])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        found = self._find(query)
        return copy.deepcopy(found[0]) if found else None

    async def insert_one(self, doc: dict[str, Any]):
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        found = self._find(query)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        found[0].update(copy.deepcopy(update["$set"]))
        return copy.deepcopy(found[0]) if return_document == ReturnDocument.AFTER else before

    async def find_one_and_delete(self, query):
        found = self._find(query)
        if not found:
            return None
        return self.docs.pop(found[0]["_id"])

    async def distinct(self, key: str, query: dict[str, Any] | None = None) -> list[Any]:
        values = []
        for doc in self._find(query):
            value = _get_path(doc, key)
            if value is not None and value not in values:
                values.append(value)
        return values


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def command(self, name: str) -> dict[str, Any]:
        return {"ok": 1}


# =============================================================================
# GridFS Bucket Double
# =============================================================================

class FakeGridIn:
    def __init__(self, bucket: "FakeBucket", filename: str, metadata: dict | None):
        self._bucket = bucket
        self._id = ObjectId()
        self.filename = filename
        self.metadata = metadata
        self.buffer = bytearray()
        self.aborted = False

    async def write(self, data: bytes) -> None:
        if self._bucket.fail_writes:
            raise PyMongoError("simulated write failure")
        self.buffer.extend(data)

    async def close(self) -> None:
        self._bucket.files[self._id] = {
            "filename": self.filename,
            "metadata": self.metadata,
            "data": bytes(self.buffer),
        }

    async def abort(self) -> None:
        self.aborted = True


class FakeGridOut:
    def __init__(self, file_id: ObjectId, stored: dict[str, Any], chunk_size: int):
        self._id = file_id
        self.filename = stored["filename"]
        self.metadata = stored["metadata"]
        self._data = stored["data"]
        self.length = len(self._data)
        self._chunk_size = chunk_size
        self._position = 0
        self.chunks_read = 0
        self.closed = False

    async def readchunk(self) -> bytes:
        chunk = self._data[self._position:self._position + self._chunk_size]
        self._position += len(chunk)
        if chunk:
            self.chunks_read += 1
        return chunk

    async def close(self) -> None:
        self.closed = True


class FakeBucket:
    """Dict-backed stand-in for AsyncGridFSBucket."""

    def __init__(self, chunk_size: int = TEST_CHUNK_SIZE):
        self.files: dict[ObjectId, dict[str, Any]] = {}
        self.uploads: list[FakeGridIn] = []
        self.downloads: list[FakeGridOut] = []
        self.chunk_size = chunk_size
        self.fail_writes = False

    def open_upload_stream(self, filename: str, metadata: dict | None = None) -> FakeGridIn:
        grid_in = FakeGridIn(self, filename, metadata)
        self.uploads.append(grid_in)
        return grid_in

    async def open_download_stream(self, file_id: ObjectId) -> FakeGridOut:
        if file_id not in self.files:
            raise NoFile(f"no file in gridfs collection with _id {file_id!r}")
        grid_out = FakeGridOut(file_id, self.files[file_id], self.chunk_size)
        self.downloads.append(grid_out)
        return grid_out

    def find(self, query: dict[str, Any]) -> FakeCursor:
        return FakeCursor([
            FakeGridOut(file_id, stored, self.chunk_size)
            for file_id, stored in self.files.items()
        ])

    async def delete(self, file_id: ObjectId) -> None:
        if file_id not in self.files:
            raise NoFile(f"file_id {file_id!r} was not found")
        del self.files[file_id]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Connect MongoClient to an empty in-memory database."""
    database = FakeDatabase()
    MongoClient.reset()
    MongoClient._database = database
    yield database
    MongoClient.reset()


@pytest.fixture
def fake_bucket(fake_db):
    """Empty image bucket registered under the configured bucket name."""
    bucket = FakeBucket()
    MongoClient._buckets[settings.IMAGES_BUCKET] = bucket
    return bucket


@pytest.fixture
def products_collection(fake_db):
    return fake_db[settings.PRODUCTS_COLLECTION]


@pytest.fixture
def uploads_dir():
    """The configured uploads directory, created and emptied for each test."""
    store = get_local_file_store()
    store.initialize()
    for path in store.directory.iterdir():
        if path.is_file():
            path.unlink()
    return store.directory


@pytest.fixture
def client(fake_bucket, uploads_dir):
    """TestClient with database doubles in place (lifespan is not run)."""
    return TestClient(app)


@pytest.fixture
def png_bytes():
    """A few bytes starting with the PNG signature."""
    return b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 4
