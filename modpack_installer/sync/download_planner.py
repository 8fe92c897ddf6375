"""
Download planning for the modpack installer.

Determines what files need to be downloaded by comparing the manifest and
server snapshot to local state. Pure: reads the filesystem, never writes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..core.files import is_within, local_mtime_seconds
from ..manifest import Manifest, ManifestEntry, ResolvedEntry, ServerSnapshot, SnapshotEntry

logger = logging.getLogger(__name__)


@dataclass
class DownloadTask:
    """A file to be downloaded."""
    url: str
    local_path: Path
    filename: str
    rel_path: str  # canonical path (category/target_path/filename)
    size: int = 0
    sha1: str = ""


def needs_fetch(local_path: Path, snapshot_entry: Optional[SnapshotEntry] = None) -> bool:
    """
    Decide whether a file must be (re)downloaded.

    - Missing locally: download.
    - Server timestamp known (> 0): download iff strictly newer than the
      local mtime, both in whole seconds.
    - Otherwise: assume the present file is fresh.
    """
    if not local_path.exists():
        logger.debug("File missing, will download: %s", local_path.name)
        return True

    server_modified = snapshot_entry.modified if snapshot_entry else 0
    if server_modified > 0:
        local_modified = local_mtime_seconds(local_path)
        if local_modified is None:
            logger.debug("Failed to get local file time for %s", local_path.name)
            return True
        needs_update = server_modified > local_modified
        logger.debug(
            "Checking %s: server=%d, local=%d, needs_update=%s",
            local_path.name, server_modified, local_modified, needs_update,
        )
        return needs_update

    logger.debug("No server timestamp for %s, skipping", local_path.name)
    return False


def _entry_needs_fetch(
    entry: ManifestEntry,
    local_path: Path,
    snapshot_key: str,
    snapshot: Optional[ServerSnapshot],
) -> bool:
    # Registry mod filenames are versioned, so presence is enough
    if not entry.uses_timestamp:
        return needs_fetch(local_path)

    snapshot_entry = snapshot.lookup(snapshot_key) if snapshot is not None else None
    if snapshot is not None and snapshot_entry is None:
        logger.debug("Server file not found for path: %s", snapshot_key)
    return needs_fetch(local_path, snapshot_entry)


def _contained_entries(manifest: Manifest, target_dir: Path, profile: str) -> Iterator[ResolvedEntry]:
    """Applicable entries, minus any whose path escapes target_dir."""
    for resolved in manifest.iter_entries(target_dir, profile):
        if not is_within(resolved.local_path, target_dir):
            logger.warning("Skipping file outside the installation: %s", resolved.snapshot_key)
            continue
        yield resolved


def plan_downloads(
    manifest: Manifest,
    snapshot: Optional[ServerSnapshot],
    target_dir: Path,
    profile: str,
) -> List[DownloadTask]:
    """
    Plan which manifest files need to be downloaded.

    Args:
        manifest: Desired state
        snapshot: Server timestamps, or None if unavailable (every
                  timestamp check then falls back to "present means fresh")
        target_dir: Installation root
        profile: Selected profile (gates core files)

    Returns:
        Tasks in processing order: registry mods, custom mods, config,
        resource packs, shader packs, loader files, data, natives, core. Entries
        whose path would land outside target_dir are skipped.
    """
    tasks = []
    for resolved in _contained_entries(manifest, target_dir, profile):
        entry = resolved.entry
        if not _entry_needs_fetch(entry, resolved.local_path, resolved.snapshot_key, snapshot):
            continue
        tasks.append(DownloadTask(
            url=entry.download_url,
            local_path=resolved.local_path,
            filename=entry.filename,
            rel_path=resolved.snapshot_key,
            size=entry.size,
            sha1=entry.sha1,
        ))
    return tasks


def has_updates(
    manifest: Manifest,
    snapshot: Optional[ServerSnapshot],
    target_dir: Path,
    profile: str,
) -> bool:
    """True if at least one file would be downloaded."""
    for resolved in _contained_entries(manifest, target_dir, profile):
        if _entry_needs_fetch(resolved.entry, resolved.local_path, resolved.snapshot_key, snapshot):
            return True
    return False
