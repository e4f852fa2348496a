# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
import time
from pathlib import PurePath

from bson import ObjectId
from bson.errors import InvalidId

from app.exceptions import InvalidIdentifierError

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Identifier Utilities
# =============================================================================

def parse_object_id(value: str) -> ObjectId:
    """
    Parse a path parameter into a MongoDB ObjectId.

    Args:
        value: Id as received in the URL

    Returns:
        The parsed ObjectId

    Raises:
        InvalidIdentifierError: If the value is not a 24-char hex string

    Example:
        oid = parse_object_id("65a1f0c2e4b0a1b2c3d4e5f6")
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdentifierError(str(value))


# =============================================================================
# Filename Utilities
# =============================================================================

def build_stored_filename(original_name: str, now_ms: int | None = None) -> str:
    """
    Build the on-disk name for an uploaded image.

    Format is `<ms timestamp>_<base name><extension>`. Whitespace runs in the
    base name become underscores, and any directory part of the client
    filename is dropped.

    Example:
        build_stored_filename("red mug.png", 1700000000000)
        # "1700000000000_red_mug.png"
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    # Clients may send Windows-style paths
    name = PurePath(original_name.replace("\\", "/")).name or "image"
    path = PurePath(name)
    ext = path.suffix
    base = name[: len(name) - len(ext)] if ext else name
    base = _WHITESPACE.sub("_", base)
    return f"{now_ms}_{base}{ext}"
