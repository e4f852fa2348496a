# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - products.py: Product CRUD, image upload and image streaming endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import products

__all__ = [
    "health",
    "products",
]
