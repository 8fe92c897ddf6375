"""
Progress reporting for installer operations.

The presentation layer subscribes by implementing ProgressListener;
the installer core only ever talks to this interface.
"""

import threading
from typing import Optional


class ProgressListener:
    """Observer for installer progress. Default methods do nothing."""

    def on_progress(self, completed: int, total: int, label: str):
        """Called before each transfer and once when a run finishes."""

    def on_status(self, text: str):
        """Short status message (current phase or terminal state)."""

    def on_installer_update(self, latest_version: str, download_url: str):
        """A newer installer is available and the manifest forces the update."""


class ProgressTracker:
    """Thread-safe (completed, total, label) accounting for one install run."""

    def __init__(self, listener: Optional[ProgressListener] = None):
        self.lock = threading.Lock()
        self.listener = listener or ProgressListener()
        self.completed = 0
        self.total = 0
        self.label = ""

    def start(self, total: int):
        with self.lock:
            self.completed = 0
            self.total = total
            self.label = ""

    def begin_file(self, filename: str):
        """Report the file about to be downloaded."""
        with self.lock:
            self.label = f"Downloading {filename}"
            completed, total, label = self.completed, self.total, self.label
        self.listener.on_progress(completed, total, label)

    def file_completed(self):
        with self.lock:
            self.completed += 1

    def finish(self, label: str):
        """Mark the run as fully done."""
        with self.lock:
            self.completed = self.total
            self.label = label
            completed, total = self.completed, self.total
        self.listener.on_progress(completed, total, label)

    def status(self, text: str):
        self.listener.on_status(text)

    @property
    def snapshot(self) -> tuple[int, int, str]:
        with self.lock:
            return self.completed, self.total, self.label
