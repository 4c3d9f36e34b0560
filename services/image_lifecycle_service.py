"""
Image lifecycle coordination.

Meal photos have no table of their own: a stored file is owned by whichever
meal row holds its path in ``Meal.image``. Callers commit the database change
first and then report the old references here; this module decides which
files are now orphaned and removes them on a best-effort basis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from adapters.blob_store import DeleteStatus, LocalBlobStore

logger = logging.getLogger("meallog.lifecycle")


@dataclass
class CleanupReport:
    """What happened to each reference handed to the coordinator."""

    deleted: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def released(self) -> int:
        """References that no longer have a file behind them"""
        return len(self.deleted) + len(self.missing)

    @property
    def ok(self) -> bool:
        return not self.failed


class ImageLifecycleCoordinator:
    def __init__(self, store: LocalBlobStore):
        self.store = store

    def meal_image_replaced(
        self, old_ref: Optional[str], new_ref: Optional[str]
    ) -> CleanupReport:
        """Call after the write installing new_ref has committed."""
        if not old_ref or old_ref == new_ref:
            return CleanupReport()
        logger.info("Meal image replaced, releasing %s", old_ref)
        return self.release([old_ref])

    def meal_deleted(self, image_ref: Optional[str]) -> CleanupReport:
        """Call after the meal delete has committed, with the ref read beforehand."""
        if not image_ref:
            return CleanupReport()
        return self.release([image_ref])

    def user_deleted(self, image_refs: Iterable[Optional[str]]) -> CleanupReport:
        """Call after a user and all of their meals were deleted."""
        report = self.release(image_refs)
        logger.info(
            "User cleanup finished deleted=%d missing=%d failed=%d",
            len(report.deleted),
            len(report.missing),
            len(report.failed),
        )
        return report

    def release(self, refs: Iterable[Optional[str]]) -> CleanupReport:
        """Delete every stored file in refs; never raises on storage errors."""
        report = CleanupReport()
        seen = set()
        for ref in refs:
            if not ref or ref in seen:
                continue
            seen.add(ref)

            key = self.store.key_for(ref)
            if key is None:
                logger.warning("Not releasing %s: outside %s", ref, self.store.url_prefix)
                report.skipped.append(ref)
                continue

            status = self.store.delete(key)
            if status is DeleteStatus.DELETED:
                report.deleted.append(ref)
            elif status is DeleteStatus.MISSING:
                report.missing.append(ref)
            else:
                logger.error("Cleanup failed for %s; file left on disk", ref)
                report.failed.append(ref)
        return report
