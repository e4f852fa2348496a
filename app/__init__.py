# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers, lifespan
# - config.py: Environment variable loading and settings
# - dependencies.py: Image store dependencies
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# storage and persistence to the core/ package.
# =============================================================================
