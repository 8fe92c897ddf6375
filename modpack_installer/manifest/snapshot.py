"""
Server snapshot for the modpack installer.

The snapshot lists the server-side last-modified time of every hosted
file, keyed by canonical path (category/target_path/filename). It is used
to detect stale local files without hashing them.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.formatting import normalize_key


@dataclass(frozen=True)
class SnapshotEntry:
    """Server-side info for one hosted file."""
    path: str
    url: str = ""
    size: int = 0
    modified: int = 0  # epoch seconds; 0 means unknown
    modified_iso: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SnapshotEntry":
        path = data.get("path")
        if not isinstance(path, str) or not path:
            raise ValueError("snapshot entry missing 'path'")
        return cls(
            path=normalize_key(path),
            url=data.get("url", "") or "",
            size=int(data.get("size", 0) or 0),
            modified=int(data.get("modified", 0) or 0),
            modified_iso=data.get("modified_iso", "") or "",
        )


@dataclass(frozen=True)
class ServerSnapshot:
    """Immutable lookup of server timestamps by canonical path."""
    timestamp: int = 0
    entries: dict = field(default_factory=dict)  # canonical path -> SnapshotEntry

    @classmethod
    def from_dict(cls, data: dict) -> "ServerSnapshot":
        """
        Build a snapshot from the parsed JSON document.

        Later duplicates of the same path replace earlier ones.

        Raises:
            ValueError: if the document is not shaped like a snapshot
        """
        if not isinstance(data, dict):
            raise ValueError("server file info must be a JSON object")
        files = data.get("files") or []
        if not isinstance(files, list):
            raise ValueError("'files' must be a list")

        entries = {}
        for item in files:
            if not isinstance(item, dict):
                raise ValueError("'files' entries must be objects")
            entry = SnapshotEntry.from_dict(item)
            entries[entry.path] = entry

        return cls(timestamp=int(data.get("timestamp", 0) or 0), entries=entries)

    def lookup(self, path: str) -> Optional[SnapshotEntry]:
        """Find the entry for a canonical path. A miss means freshness is unknown."""
        return self.entries.get(normalize_key(path))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path: str) -> bool:
        return self.lookup(path) is not None
