# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Product Catalog API:
# - test_models.py: Pydantic model validation and derived image fields
# - test_utils.py: ObjectId parsing and stored filename building
# - test_storage_service.py: Disk and GridFS image stores
# - test_orphan_service.py: Orphaned image sweep
# - test_products_api.py: HTTP endpoints end to end
# - test_health.py: Health endpoints
#
# Run tests with: pytest
# =============================================================================
