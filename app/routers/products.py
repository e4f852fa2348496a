# =============================================================================
# app/routers/products.py - Product Catalog Endpoints
# =============================================================================
# CRUD endpoints for products, plus the two image ingestion paths:
# - POST ""      image written to the uploads directory (served at /uploads)
# - POST "/grid" image written into the MongoDB GridFS bucket
# and the blob retrieval endpoint GET "/image/{image_id}".
#
# Image replacement on PUT only goes through the uploads directory.
# =============================================================================

import logging
import math
from typing import Annotated

from fastapi import APIRouter, File, Form, Path, Request, UploadFile
from fastapi.responses import StreamingResponse

from app.config import settings
from app.dependencies import BlobStoreDep, LocalFileStoreDep
from app.exceptions import (
    PayloadTooLargeError,
    StorageUnavailableError,
    UnsupportedMediaError,
    ValidationError,
)
from core.models.product import ProductCreate, ProductResponse, ProductUpdate
from core.services.product_service import ProductService
from core.services.storage_service import ImageUpload, is_accepted_image_type
from lib.mongo_client import MongoClient
from lib.utils import parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter()

# Form field annotations shared by the ingestion endpoints
NameForm = Annotated[str | None, Form(description="Product name (required on create)")]
DescriptionForm = Annotated[str | None, Form(description="Product description")]
PriceForm = Annotated[str | None, Form(description="Price, a number >= 0 (required on create)")]
ImageFile = Annotated[UploadFile | None, File(description="Image file (png, jpeg, webp, gif)")]
ProductId = Annotated[str, Path(description="Product id")]


# =============================================================================
# Helper Functions
# =============================================================================

def _parse_price(raw: str) -> float:
    """Coerce a form value to a non-negative price."""
    try:
        price = float(raw)
    except ValueError:
        raise ValidationError(f"price must be a number, got: {raw!r}", ["price"])
    if not math.isfinite(price) or price < 0:
        raise ValidationError(f"price must be a number >= 0, got: {raw!r}", ["price"])
    return price


def _require_fields(name: str | None, price: str | None) -> tuple[str, float]:
    """Check the fields every create call needs. Lists all missing ones at once."""
    missing = []
    if name is None or not name.strip():
        missing.append("name")
    if price is None:
        missing.append("price")
    if missing:
        raise ValidationError.missing(missing)
    return name, _parse_price(price)


def _has_file(image: UploadFile | None) -> bool:
    return image is not None and bool(image.filename)


async def _read_image(image: UploadFile) -> ImageUpload:
    """
    Validate and read an uploaded image.

    The content-type is checked before any byte is read; at most one byte
    past the limit is read to detect oversize payloads.

    Raises:
        UnsupportedMediaError: If the content-type is not an accepted image
        PayloadTooLargeError: If the payload exceeds MAX_UPLOAD_SIZE_MB
    """
    logger.debug(f"File received: {image.filename} ({image.content_type})")

    if not is_accepted_image_type(image.content_type):
        raise UnsupportedMediaError(image.content_type, settings.allowed_image_types_list)

    limit = settings.max_upload_size_bytes
    data = await image.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLargeError(settings.MAX_UPLOAD_SIZE_MB)

    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        data=data,
    )


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get("", response_model=list[ProductResponse])
async def list_products():
    """
    List all products, most recently created first.
    """
    return await ProductService.list_products()


@router.get("/image/{image_id}")
async def get_image(
    image_id: Annotated[str, Path(description="Blob id from imageFileId")],
    blob_store: BlobStoreDep,
):
    """
    Stream a database-stored image.

    Bytes are forwarded chunk by chunk with the content-type recorded at
    upload time. Unknown ids answer 404 before any byte is sent.
    """
    if not MongoClient.is_ready():
        raise StorageUnavailableError()

    blob_id = parse_object_id(image_id)
    download = await blob_store.open_download(blob_id)

    return StreamingResponse(
        download.chunks,
        media_type=download.content_type,
        headers={"Content-Length": str(download.length)},
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: ProductId):
    """
    Get a single product.
    """
    return await ProductService.get_product(parse_object_id(product_id))


# =============================================================================
# Ingestion Endpoints
# =============================================================================

@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    local_store: LocalFileStoreDep,
    name: NameForm = None,
    description: DescriptionForm = None,
    price: PriceForm = None,
    image: ImageFile = None,
):
    """
    Create a product, storing the optional image on disk.

    The image is served back at `imageUrl` (`/uploads/<filename>`).
    """
    name, price_value = _require_fields(name, price)

    image_ref = None
    if _has_file(image):
        upload = await _read_image(image)
        image_ref = await local_store.save(upload)

    return await ProductService.create_product(
        ProductCreate(
            name=name,
            description=description or "",
            price=price_value,
            image=image_ref,
        )
    )


@router.post("/grid", response_model=ProductResponse, status_code=201)
async def create_product_with_blob_image(
    blob_store: BlobStoreDep,
    name: NameForm = None,
    description: DescriptionForm = None,
    price: PriceForm = None,
    image: ImageFile = None,
):
    """
    Create a product, storing the optional image in the database.

    The image is written to the GridFS bucket before the record. `imageFileId`
    holds the blob id and `imageUrl` points at GET /api/products/image/{id}.
    """
    name, price_value = _require_fields(name, price)

    image_ref = None
    if _has_file(image):
        upload = await _read_image(image)
        image_ref = await blob_store.save(upload)

    return await ProductService.create_product(
        ProductCreate(
            name=name,
            description=description or "",
            price=price_value,
            image=image_ref,
        )
    )


# =============================================================================
# Update / Delete Endpoints
# =============================================================================

@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    request: Request,
    product_id: ProductId,
    local_store: LocalFileStoreDep,
    name: NameForm = None,
    description: DescriptionForm = None,
    price: PriceForm = None,
    image: ImageFile = None,
):
    """
    Partially update a product.

    Only supplied fields change. An empty description clears it, an empty
    name or price is rejected. A supplied image replaces the current one
    and is always stored on disk; database-stored replacement is not
    supported on this route. The previous image is left in storage.
    """
    oid = parse_object_id(product_id)

    # FastAPI turns "" into the parameter default, so presence comes from
    # the raw form (already parsed and cached on the request).
    form = await request.form()
    changes = {}

    if "name" in form:
        if name is None or not name.strip():
            raise ValidationError("name must not be empty", ["name"])
        changes["name"] = name
    if "description" in form:
        changes["description"] = description or ""
    if "price" in form:
        changes["price"] = _parse_price(price or "")

    # Confirm the record exists before writing a replacement image
    await ProductService.get_product(oid)

    if _has_file(image):
        upload = await _read_image(image)
        changes["image"] = await local_store.save(upload)

    return await ProductService.update_product(oid, ProductUpdate(**changes))


@router.delete("/{product_id}")
async def delete_product(product_id: ProductId):
    """
    Delete a product. Its stored image, if any, is kept.
    """
    await ProductService.delete_product(parse_object_id(product_id))
    return {"message": "Deleted"}
