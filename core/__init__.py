# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the catalog logic:
# - models/: Pydantic schemas for products and image references
# - services/: product records, image storage backends, orphan sweep
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable from scripts.
# =============================================================================
