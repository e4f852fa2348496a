#!/usr/bin/env python3
# =============================================================================
# scripts/sweep_orphans.py - Orphaned Image Sweep
# =============================================================================
# Lists stored files and GridFS blobs that no product references.
# Deleting a product never removes its image, so these accumulate over time.
#
# Usage:
#   # Dry run (report only)
#   python scripts/sweep_orphans.py
#
#   # Remove the orphans
#   python scripts/sweep_orphans.py --delete
#
#   # Include images uploaded in the last hour (default skips them)
#   python scripts/sweep_orphans.py --min-age-minutes 0
#
# Prerequisites:
#   - MongoDB reachable at MONGODB_URI (.env file or environment)
# =============================================================================

import argparse
import asyncio
import os
import sys
from datetime import timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.dependencies import get_blob_store, get_local_file_store
from core.services.orphan_service import OrphanService
from lib.mongo_client import MongoClient


async def run(delete: bool, min_age_minutes: int | None = None) -> int:
    if not await MongoClient.connect():
        print("MongoDB is not reachable; check MONGODB_URI")
        return 1

    try:
        min_age = timedelta(minutes=min_age_minutes) if min_age_minutes is not None else None
        service = OrphanService(get_local_file_store(), get_blob_store(), min_age=min_age)
        report = await service.sweep(delete=delete)
    finally:
        await MongoClient.close()

    action = "Deleted" if report.deleted else "Found"
    print(f"{action} {len(report.orphan_files)} orphan files:")
    for name in report.orphan_files:
        print(f"  {name}")
    print(f"{action} {len(report.orphan_blobs)} orphan blobs:")
    for blob_id in report.orphan_blobs:
        print(f"  {blob_id}")

    if report.total and not report.deleted:
        print()
        print("Re-run with --delete to remove them")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Find images no product references")
    parser.add_argument("--delete", action="store_true", help="remove the orphans")
    parser.add_argument(
        "--min-age-minutes",
        type=int,
        default=None,
        help="skip images younger than this (default: ORPHAN_MIN_AGE_MINUTES)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.delete, args.min_age_minutes)))


if __name__ == "__main__":
    main()
