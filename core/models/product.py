# =============================================================================
# core/models/product.py - Product Schemas
# =============================================================================
# These models define the API contract for catalog operations:
# - ImageKind / ImageRef: where a product's image lives (disk or database)
# - ProductCreate / ProductUpdate: validated input for the product service
# - ProductResponse: output returned to clients (camelCase on the wire)
#
# The stored record keeps a single tagged ImageRef. The legacy `imageUrl` and
# `imageFileId` fields are derived from it when a response is built.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# Public path prefixes used to build imageUrl
UPLOADS_URL_PREFIX = "/uploads"
BLOB_URL_PREFIX = "/api/products/image"


class ImageKind(str, Enum):
    """
    Storage backend holding a product image.

    - local_file: file in the uploads directory, served as a static file
    - blob: chunked blob in the database image bucket, streamed by id
    """
    LOCAL_FILE = "local_file"
    BLOB = "blob"


class ImageRef(BaseModel):
    """
    Tagged reference to a stored image.

    Example:
        {"kind": "local_file", "locator": "1700000000000_red_mug.png"}
        {"kind": "blob", "locator": "65a1f0c2e4b0a1b2c3d4e5f6"}
    """

    kind: ImageKind
    locator: str = Field(..., min_length=1)

    @property
    def url(self) -> str:
        if self.kind == ImageKind.BLOB:
            return f"{BLOB_URL_PREFIX}/{self.locator}"
        return f"{UPLOADS_URL_PREFIX}/{self.locator}"


class ProductCreate(BaseModel):
    """
    Validated input for creating a product.

    Built by the ingestion routes after form parsing and image storage.
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Product name"
    )

    description: str = Field(
        default="",
        description="Free-text description"
    )

    price: float = Field(
        ...,
        ge=0,
        description="Unit price, non-negative"
    )

    image: ImageRef | None = Field(
        default=None,
        description="Stored image reference, if an image was uploaded"
    )


class ProductUpdate(BaseModel):
    """
    Partial update. Only fields that were explicitly set are written,
    so an explicit empty description clears it.
    """

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    image: ImageRef | None = None

    def to_update_doc(self) -> dict[str, Any]:
        """Build the `$set` payload from the fields the caller supplied."""
        return self.model_dump(mode="json", exclude_unset=True)


class ProductResponse(BaseModel):
    """
    Schema for returning product data to clients.

    Example:
        {
            "id": "65a1f0c2e4b0a1b2c3d4e5f6",
            "name": "Red mug",
            "description": "",
            "price": 9.5,
            "image": {"kind": "blob", "locator": "65a1f0c2e4b0a1b2c3d4e5f7"},
            "imageUrl": "/api/products/image/65a1f0c2e4b0a1b2c3d4e5f7",
            "imageFileId": "65a1f0c2e4b0a1b2c3d4e5f7",
            "createdAt": "2024-01-15T10:30:00Z",
            "updatedAt": "2024-01-15T10:30:00Z"
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    price: float
    image: ImageRef | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="imageUrl")
    @property
    def image_url(self) -> str:
        return self.image.url if self.image else ""

    @computed_field(alias="imageFileId")
    @property
    def image_file_id(self) -> str | None:
        if self.image and self.image.kind == ImageKind.BLOB:
            return self.image.locator
        return None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ProductResponse":
        """Build a response from a raw `products` document."""
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            description=doc.get("description", ""),
            price=doc["price"],
            image=doc.get("image"),
            created_at=doc["createdAt"],
            updated_at=doc["updatedAt"],
        )
