# =============================================================================
# core/services/product_service.py - Product Business Logic
# =============================================================================
# Handles product CRUD operations against the `products` collection.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from app.config import settings
from app.exceptions import ProductNotFoundError
from core.models.product import ImageKind, ProductCreate, ProductResponse, ProductUpdate
from lib.mongo_client import MongoClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductService:
    """
    Service for product record operations.

    Records never own their images: deleting a product leaves its stored
    file or blob in place.
    """

    @staticmethod
    def _collection():
        return MongoClient.get_collection(settings.PRODUCTS_COLLECTION)

    @staticmethod
    async def list_products() -> list[ProductResponse]:
        """
        List all products, newest first.

        Returns:
            Products ordered by createdAt descending
        """
        cursor = ProductService._collection().find().sort("createdAt", DESCENDING)
        docs = await cursor.to_list(None)
        return [ProductResponse.from_document(doc) for doc in docs]

    @staticmethod
    async def get_product(product_id: ObjectId) -> ProductResponse:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        doc = await ProductService._collection().find_one({"_id": product_id})
        if doc is None:
            raise ProductNotFoundError(str(product_id))
        return ProductResponse.from_document(doc)

    @staticmethod
    async def create_product(data: ProductCreate) -> ProductResponse:
        """
        Insert a new product record.

        Args:
            data: Validated product fields, including any stored image

        Returns:
            The created product
        """
        now = _utcnow()
        doc: dict[str, Any] = data.model_dump(mode="json")
        doc["createdAt"] = now
        doc["updatedAt"] = now

        result = await ProductService._collection().insert_one(doc)
        doc["_id"] = result.inserted_id

        image = data.image.url if data.image else "no image"
        logger.info(f"Created product {result.inserted_id} ({image})")
        return ProductResponse.from_document(doc)

    @staticmethod
    async def update_product(product_id: ObjectId, data: ProductUpdate) -> ProductResponse:
        """
        Apply a partial update.

        Only fields present in `data` are written; updatedAt is always bumped.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        update_doc = data.to_update_doc()
        update_doc["updatedAt"] = _utcnow()

        doc = await ProductService._collection().find_one_and_update(
            {"_id": product_id},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise ProductNotFoundError(str(product_id))

        logger.info(f"Updated product {product_id}: {sorted(update_doc)}")
        return ProductResponse.from_document(doc)

    @staticmethod
    async def delete_product(product_id: ObjectId) -> None:
        """
        Delete a product record. Referenced images are not touched.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        doc = await ProductService._collection().find_one_and_delete({"_id": product_id})
        if doc is None:
            raise ProductNotFoundError(str(product_id))
        logger.info(f"Deleted product {product_id}")

    @staticmethod
    async def referenced_locators(kind: ImageKind) -> set[str]:
        """Image locators of the given kind that some product still references."""
        values = await ProductService._collection().distinct(
            "image.locator", {"image.kind": kind.value}
        )
        return {str(v) for v in values}
