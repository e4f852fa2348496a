# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - mongo_client.py: MongoDB connection singleton (database, collections, GridFS)
# - utils.py: Shared utilities (ObjectId parsing, stored filename building)
# =============================================================================

from lib.mongo_client import MongoClient
from lib.utils import build_stored_filename, parse_object_id

__all__ = [
    "MongoClient",
    "build_stored_filename",
    "parse_object_id",
]
