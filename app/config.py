# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.MONGODB_URI)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value has a development default, so the API starts against a
    local MongoDB without any .env file.
    """

    # -------------------------------------------------------------------------
    # MongoDB Configuration
    # -------------------------------------------------------------------------

    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string (local or Atlas)"
    )

    MONGODB_DATABASE: str = Field(
        default="catalog",
        min_length=1,
        description="Database holding products and the image bucket"
    )

    MONGODB_TIMEOUT_MS: int = Field(
        default=5000,
        ge=100,
        description="Server selection timeout used for the startup ping"
    )

    PRODUCTS_COLLECTION: str = Field(
        default="products",
        min_length=1,
        description="Collection storing product records"
    )

    IMAGES_BUCKET: str = Field(
        default="images",
        min_length=1,
        description="GridFS bucket name for database-stored images"
    )

    BLOB_CHUNK_SIZE_KB: int = Field(
        default=255,
        ge=1,
        le=15 * 1024,
        description="GridFS chunk size in KB"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Image Upload Settings
    # -------------------------------------------------------------------------

    UPLOADS_DIR: str = Field(
        default="uploads",
        min_length=1,
        description="Directory for disk-stored images, served under /uploads"
    )

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=16,
        description="Maximum image upload size in MB"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="png,jpeg,jpg,webp,gif",
        description="Accepted image/* subtypes (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    ORPHAN_MIN_AGE_MINUTES: int = Field(
        default=60,
        ge=0,
        description="Orphan sweep skips images younger than this"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://shop.com" -> ["http://localhost:3000", "https://shop.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_types_list(self) -> list[str]:
        """
        Parse ALLOWED_IMAGE_TYPES string into a list of subtypes.

        Example: "png, JPEG" -> ["png", "jpeg"]
        """
        return [
            subtype.strip().lower()
            for subtype in self.ALLOWED_IMAGE_TYPES.split(",")
            if subtype.strip()
        ]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for upload size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def blob_chunk_size_bytes(self) -> int:
        return self.BLOB_CHUNK_SIZE_KB * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
