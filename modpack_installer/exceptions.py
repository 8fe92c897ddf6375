"""
Exceptions raised by the modpack installer.
"""

from pathlib import Path
from typing import Optional


class InstallerError(Exception):
    """Base class for installer errors."""


class FetchFailure(InstallerError):
    """The manifest or server snapshot could not be retrieved or parsed."""

    def __init__(self, document: str, reason: str):
        self.document = document
        self.reason = reason
        super().__init__(f"Failed to load {document}: {reason}")


class SnapshotDegraded(FetchFailure):
    """Snapshot fetch failed during an install; the run continues without timestamps."""

    def __init__(self, reason: str):
        super().__init__("server file info", reason)


class TransferFailure(InstallerError):
    """A single file exhausted its download attempts."""

    def __init__(self, url: str, destination: Path, attempts: int, last_error: Optional[str] = None):
        self.url = url
        self.destination = destination
        self.attempts = attempts
        self.last_error = last_error
        message = f"Failed to download {url} after {attempts} attempts"
        if last_error:
            message += f": {last_error}"
        super().__init__(message)


class CleanupFailure(InstallerError):
    """A stale file could not be removed. Recorded, never fatal."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to delete {path}: {reason}")
