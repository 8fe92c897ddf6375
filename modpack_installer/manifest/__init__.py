"""
Manifest management for the modpack installer.

The manifest declares every file an installation should contain; the
server snapshot gives per-path modification times used for staleness.
"""

from .manifest import (
    EntryKind,
    InstallerInfo,
    Manifest,
    ManifestEntry,
    ModpackInfo,
    ResolvedEntry,
)
from .snapshot import ServerSnapshot, SnapshotEntry
from .fetch import fetch_manifest, fetch_snapshot, get_certifi_path

__all__ = [
    # Manifest
    "EntryKind",
    "InstallerInfo",
    "Manifest",
    "ManifestEntry",
    "ModpackInfo",
    "ResolvedEntry",
    # Snapshot
    "ServerSnapshot",
    "SnapshotEntry",
    # Fetching
    "fetch_manifest",
    "fetch_snapshot",
    "get_certifi_path",
]
