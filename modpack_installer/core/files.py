"""
File system utilities for the modpack installer.
"""

import os
from pathlib import Path
from typing import Iterator, Optional


def local_mtime_seconds(path: Path) -> Optional[int]:
    """Last-modified time in whole seconds, or None if it can't be read."""
    try:
        return int(path.stat().st_mtime)
    except OSError:
        return None


def is_writable(path: Path) -> bool:
    """Check if a file can be removed/overwritten by this process."""
    return os.access(path, os.W_OK)


def iter_regular_files(folder_path: Path) -> Iterator[Path]:
    """
    Yield every regular file under folder_path, recursively.

    Symlinks are not followed. Unreadable directories are skipped.
    """
    if not folder_path.is_dir():
        return

    stack = [folder_path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                children = sorted(entries, key=lambda e: e.name)
        except OSError:
            continue
        subdirs = []
        for entry in children:
            if entry.is_file(follow_symlinks=False):
                yield Path(entry.path)
            elif entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
        # Reverse so subdirectories are visited in name order
        stack.extend(reversed(subdirs))


def is_within(path: Path, root: Path) -> bool:
    """True if path resolves to root or somewhere beneath it."""
    resolved_root = root.resolve()
    resolved = path.resolve()
    return resolved == resolved_root or resolved_root in resolved.parents
