"""
Terminal progress display for the modpack installer.

Implements ProgressListener so the installer core never touches the
terminal directly.
"""

import shutil
import sys
import threading

from ..constants import INSTALLER_VERSION
from ..core.formatting import format_progress
from ..core.progress import ProgressListener
from .colors import Colors

# Status texts that end an operation, with their color
_TERMINAL_COLORS = {
    "Updates available": Colors.ORANGE,
    "Modpack up to date": Colors.BLUE,
    "No updates found": Colors.BLUE,
    "Modpack installed successfully!": Colors.GREEN,
    "Modpack updated successfully!": Colors.GREEN,
    "Modpack removed successfully": Colors.GREEN,
    "Installation failed": Colors.RED,
    "Update failed": Colors.RED,
    "Failed to load configuration": Colors.RED,
    "Failed to remove modpack": Colors.RED,
}


def print_header():
    c = Colors
    print(f"{c.BOLD}PokéCubed Redux Modpack Installer{c.RESET} {c.DIM}v{INSTALLER_VERSION}{c.RESET}")
    print()


def confirm(question: str, message: str = "") -> bool:
    """Ask a yes/no question on the terminal. Defaults to no."""
    if message:
        print(message)
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


class ConsoleProgress(ProgressListener):
    """Single-line progress bar plus status lines."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.lock = threading.Lock()
        self._line_open = False
        self.installer_update = None

    def _end_line(self):
        if self._line_open:
            self.stream.write("\n")
            self._line_open = False

    def on_progress(self, completed: int, total: int, label: str):
        pct = format_progress(completed, total)
        line = f"  {pct:3d}% ({completed}/{total} files) - {label}"
        term_width = shutil.get_terminal_size().columns
        if len(line) > term_width - 1:
            line = line[:max(term_width - 4, 10)] + "..."
        with self.lock:
            self.stream.write("\r\x1b[2K" + line)
            self.stream.flush()
            self._line_open = True
            if completed >= total:
                self._end_line()

    def on_status(self, text: str):
        color = _TERMINAL_COLORS.get(text, Colors.DIM)
        with self.lock:
            self._end_line()
            self.stream.write(f"{color}{text}{Colors.RESET}\n")
            self.stream.flush()

    def on_installer_update(self, latest_version: str, download_url: str):
        self.installer_update = (latest_version, download_url)
        with self.lock:
            self._end_line()
            self.stream.write(
                f"{Colors.ORANGE}A new version of the installer is available.{Colors.RESET}\n"
                f"  Current: {INSTALLER_VERSION}\n"
                f"  Latest: {latest_version}\n"
            )
            self.stream.flush()
