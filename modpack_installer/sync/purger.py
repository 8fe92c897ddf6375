"""
File deletion (purging) for the modpack installer.

Removes files from a cleanup plan. Failures are recorded per file and
never abort the run.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ..core.files import is_writable
from ..exceptions import CleanupFailure
from .purge_planner import PurgeItem

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    """Outcome of a cleanup pass."""
    deleted: List[PurgeItem] = field(default_factory=list)
    skipped: List[PurgeItem] = field(default_factory=list)  # read-only files
    failures: List[CleanupFailure] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def deleted_size(self) -> int:
        return sum(item.size for item in self.deleted)


def delete_files(items: List[PurgeItem]) -> PurgeResult:
    """
    Delete planned files, skipping read-only ones.

    Returns:
        PurgeResult listing deleted, skipped, and failed files
    """
    result = PurgeResult()
    for item in items:
        if not is_writable(item.path):
            logger.warning("Skipping read-only file: %s/%s", item.category, item.rel_path)
            result.skipped.append(item)
            continue
        try:
            item.path.unlink()
        except OSError as e:
            failure = CleanupFailure(item.path, str(e))
            logger.warning("Failed to delete %s/%s: %s", item.category, item.rel_path, e)
            result.failures.append(failure)
            continue
        logger.info("Deleted old %s file: %s", item.category, item.rel_path)
        result.deleted.append(item)
    return result
