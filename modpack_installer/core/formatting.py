"""
Formatting and path utilities for the modpack installer.
"""

from pathlib import Path
from typing import Union


# ============================================================================
# Cross-platform path utilities
# ============================================================================

def to_posix(path: Union[str, Path]) -> str:
    """
    Convert a path to a posix-style string (forward slashes).

    Works consistently across platforms - use this instead of str(path)
    when storing or comparing paths.
    """
    if isinstance(path, Path):
        return path.as_posix()
    return path.replace("\\", "/")


def relative_posix(path: Path, base: Path) -> str:
    """
    Get the relative path as a posix-style string.

    Use instead of str(path.relative_to(base)) for cross-platform consistency.
    """
    return path.relative_to(base).as_posix()


def join_posix(*parts: str) -> str:
    """
    Join path parts with forward slashes, skipping empty parts.

    join_posix("config", "", "opts.json") -> "config/opts.json"
    """
    cleaned = [to_posix(p).strip("/") for p in parts]
    return "/".join(p for p in cleaned if p)


def normalize_key(path: str) -> str:
    """Normalize a snapshot path: forward slashes, no leading "./" or "/"."""
    path = to_posix(path).strip()
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def encode_url(url: str) -> str:
    """Escape spaces and fix backslashes in manifest URLs."""
    return url.replace(" ", "%20").replace("\\", "/")


# ============================================================================
# Size and progress formatting
# ============================================================================

def format_size(size_bytes: int) -> str:
    """Format bytes as human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_progress(completed: int, total: int) -> int:
    """Whole-number percentage; an empty plan counts as done."""
    if total <= 0:
        return 100
    return (completed * 100) // total
