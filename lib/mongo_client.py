# =============================================================================
# lib/mongo_client.py - MongoDB Client Wrapper
# =============================================================================
# This module owns the single MongoDB connection used by the API:
# - the async client and the catalog database
# - collections (products)
# - GridFS buckets (images)
#
# The connection is opened once in the FastAPI lifespan. Until then (or if the
# startup ping failed) every accessor raises StorageUnavailableError, which the
# API renders as a 500 "DB not ready".
#
# Usage:
#   from lib.mongo_client import MongoClient
#   products = MongoClient.get_collection("products")
#   bucket = MongoClient.get_bucket("images")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from gridfs import AsyncGridFSBucket
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from app.config import settings
from app.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class MongoClient:
    """
    Singleton wrapper around the async MongoDB client.

    All methods are class methods, so callers never instantiate it. Tests
    replace `_database` and `_buckets` with in-memory doubles.
    """

    _client: AsyncMongoClient | None = None
    _database: Any = None
    _buckets: dict[str, Any] = {}

    @classmethod
    async def connect(cls) -> bool:
        """
        Open the client and verify the server answers a ping.

        Returns:
            True if the database is ready, False otherwise. A failed ping
            leaves the client disconnected so storage routes answer 500.
        """
        if cls._database is not None:
            return True

        client = AsyncMongoClient(
            settings.MONGODB_URI,
            serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
            tz_aware=True,
        )
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB connection failed: {e}")
            await client.close()
            return False

        cls._client = client
        cls._database = client[settings.MONGODB_DATABASE]
        logger.info(f"MongoDB connected (database: {settings.MONGODB_DATABASE})")
        return True

    @classmethod
    async def close(cls) -> None:
        """Close the client and forget the database handle."""
        if cls._client is not None:
            await cls._client.close()
            logger.info("MongoDB connection closed")
        cls.reset()

    @classmethod
    def reset(cls) -> None:
        cls._client = None
        cls._database = None
        cls._buckets = {}

    @classmethod
    def is_ready(cls) -> bool:
        return cls._database is not None

    @classmethod
    def get_database(cls) -> Any:
        """
        Get the catalog database.

        Raises:
            StorageUnavailableError: If the connection is not ready
        """
        if cls._database is None:
            raise StorageUnavailableError()
        return cls._database

    @classmethod
    def get_collection(cls, name: str) -> Any:
        return cls.get_database()[name]

    @classmethod
    def get_bucket(cls, name: str) -> Any:
        """
        Get (and cache) a GridFS bucket.

        Raises:
            StorageUnavailableError: If the connection is not ready
        """
        database = cls.get_database()
        if name not in cls._buckets:
            cls._buckets[name] = AsyncGridFSBucket(
                database,
                bucket_name=name,
                chunk_size_bytes=settings.blob_chunk_size_bytes,
            )
        return cls._buckets[name]

    @classmethod
    async def ping(cls) -> bool:
        """Check that the database still answers. Used by readiness checks."""
        try:
            await cls.get_database().command("ping")
            return True
        except (PyMongoError, StorageUnavailableError) as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
