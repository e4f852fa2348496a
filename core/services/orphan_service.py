# =============================================================================
# core/services/orphan_service.py - Orphaned Image Sweep
# =============================================================================
# Product deletes never cascade to images, and a blob can be written while the
# record insert that follows it fails. This administrative sweep finds stored
# files and blobs that no product references. Product records are the only
# source of truth for reachability.
#
# Ingestion writes the image before the record, so a fresh image may not be
# referenced yet. The sweep lists candidates first, reads references second,
# and ignores anything younger than the minimum age.
# =============================================================================

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from app.config import settings
from core.models.product import ImageKind
from core.services.product_service import ProductService
from core.services.storage_service import BlobImageStore, LocalFileStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Result of one sweep."""
    orphan_files: list[str] = field(default_factory=list)
    orphan_blobs: list[str] = field(default_factory=list)
    deleted: bool = False

    @property
    def total(self) -> int:
        return len(self.orphan_files) + len(self.orphan_blobs)


class OrphanService:
    """Finds (and optionally removes) unreferenced images."""

    def __init__(
        self,
        local_store: LocalFileStore,
        blob_store: BlobImageStore,
        min_age: timedelta | None = None,
    ):
        self.local_store = local_store
        self.blob_store = blob_store
        if min_age is None:
            min_age = timedelta(minutes=settings.ORPHAN_MIN_AGE_MINUTES)
        self.min_age = min_age

    async def find_orphans(self) -> SweepReport:
        cutoff = datetime.now(timezone.utc) - self.min_age

        # Candidates before references: an image saved after the listing is
        # never a candidate, and one referenced before the read is kept.
        stored_files = self.local_store.list_files(older_than=cutoff)
        stored_blobs = await self.blob_store.list_ids(older_than=cutoff)

        referenced_files = set(await ProductService.referenced_locators(ImageKind.LOCAL_FILE))
        referenced_blobs = set(await ProductService.referenced_locators(ImageKind.BLOB))

        report = SweepReport(
            orphan_files=[name for name in stored_files if name not in referenced_files],
            orphan_blobs=[blob_id for blob_id in stored_blobs if blob_id not in referenced_blobs],
        )
        logger.info(
            f"Sweep found {len(report.orphan_files)} orphan files "
            f"and {len(report.orphan_blobs)} orphan blobs older than {self.min_age}"
        )
        return report

    async def sweep(self, delete: bool = False) -> SweepReport:
        """
        Find orphans and, when `delete` is set, remove them.

        Dry run by default.
        """
        report = await self.find_orphans()
        if not delete:
            return report

        for name in report.orphan_files:
            self.local_store.delete(name)
        for blob_id in report.orphan_blobs:
            await self.blob_store.delete(blob_id)

        report.deleted = True
        return report
