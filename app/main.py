# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Product Catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main          (API_HOST, API_PORT, reload in development)
# =============================================================================

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.dependencies import get_local_file_store
from app.exceptions import (
    CatalogException,
    catalog_exception_handler,
    unexpected_exception_handler,
)
from app.routers import health, products
from app.routers.health import API_VERSION
from core.models.product import UPLOADS_URL_PREFIX
from lib.mongo_client import MongoClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: create the uploads directory, connect to MongoDB
    - Shutdown: close the MongoDB client
    """
    logger.info(f"Starting Product Catalog API in {settings.ENVIRONMENT} mode")

    get_local_file_store().initialize()

    if not await MongoClient.connect():
        logger.error("MongoDB unavailable, storage endpoints will answer 500 until restart")

    yield

    logger.info("Shutting down Product Catalog API")
    await MongoClient.close()


# Create FastAPI application
app = FastAPI(
    title="Product Catalog API",
    description="""
## Product Catalog API

CRUD for catalog products with two image storage options.

| Route | Image storage |
|-------|---------------|
| `POST /api/products` | File in the uploads directory, served at `/uploads/<file>` |
| `POST /api/products/grid` | Blob in MongoDB GridFS, served at `/api/products/image/<id>` |
| `PUT /api/products/{id}` | Replacement image always goes to the uploads directory |

Accepted images: png, jpeg, webp, gif, up to 5MB.
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Products",
            "description": "Product CRUD and image upload/streaming",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(CatalogException, catalog_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    products.router,
    prefix="/api/products",
    tags=["Products"]
)

app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

# Disk-stored images; the directory is created in lifespan
app.mount(
    UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
    name="uploads",
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Product Catalog API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


# =============================================================================
# Direct Run
# =============================================================================

def run():
    """Serve the app with uvicorn, reloading on code changes in development."""
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
        log_level="debug" if settings.DEBUG else "info",
    )


# Allows `python -m app.main`
if __name__ == "__main__":
    run()
