"""
Installer self-update.

Downloads a helper updater and the new installer package next to the
running package, then hands over to the updater process:

    java -jar <updater> <new_package> <current_package> <version>

What the updater does after that is outside this package.
"""

import logging
import subprocess
import time
from pathlib import Path
from typing import Optional

from .constants import NEW_PACKAGE_FILENAME, UPDATER_FILENAME, UPDATER_URL
from .core.paths import get_current_package_path
from .exceptions import InstallerError
from .sync.downloader import FileDownloader

logger = logging.getLogger(__name__)


def build_updater_command(updater_path: Path, new_package: Path, current_package: Path, version: str) -> list[str]:
    return ["java", "-jar", str(updater_path), str(new_package), str(current_package), version]


def download_update(
    downloader: FileDownloader,
    download_url: Optional[str],
    current_package: Optional[Path] = None,
    updater_url: str = UPDATER_URL,
) -> tuple[Path, Path]:
    """
    Fetch the updater and the new installer package.

    Args:
        downloader: Downloader used for both files
        download_url: URL of the new installer package
        current_package: Running package (detected if omitted)
        updater_url: URL of the updater helper

    Returns:
        Tuple of (updater_path, new_package_path)

    Raises:
        InstallerError: no download URL or unknown package location
        TransferFailure: either download failed
    """
    if not download_url:
        raise InstallerError("No download URL provided for update.")
    current_package = current_package or get_current_package_path()
    if current_package is None:
        raise InstallerError("Cannot determine current installer location.")

    install_dir = current_package.parent
    updater_path = install_dir / UPDATER_FILENAME
    new_package = install_dir / NEW_PACKAGE_FILENAME

    logger.info("Downloading updater from: %s", updater_url)
    downloader.download_or_raise(updater_url, updater_path)
    logger.info("Updater downloaded to: %s", updater_path)

    logger.info("Downloading new installer from: %s", download_url)
    downloader.download_or_raise(download_url, new_package)
    logger.info("New installer downloaded to: %s", new_package)

    return updater_path, new_package


def launch_updater(updater_path: Path, new_package: Path, current_package: Path, version: str) -> subprocess.Popen:
    """
    Start the updater as a detached process. The caller should exit right after.

    Raises:
        InstallerError: the process could not be started
    """
    command = build_updater_command(updater_path, new_package, current_package, version or "unknown")
    logger.info("Starting updater with args: %s", " ".join(command[3:]))
    try:
        process = subprocess.Popen(command, cwd=str(current_package.parent))
    except OSError as e:
        raise InstallerError(f"Failed to start updater: {e}") from e
    logger.info("Updater started, exiting installer...")
    return process


def cleanup_leftover_updater(current_package: Optional[Path] = None, delay: float = 1.0) -> bool:
    """
    Delete an updater left next to the package by a previous self-update.

    Returns True if a file was removed. Failures are logged, not raised.
    """
    current_package = current_package or get_current_package_path()
    if current_package is None:
        return False
    updater_path = current_package.parent / UPDATER_FILENAME
    if not updater_path.exists():
        return False
    # Give the exiting updater a moment to release the file
    if delay > 0:
        time.sleep(delay)
    try:
        updater_path.unlink()
    except OSError as e:
        logger.warning("Failed to cleanup updater: %s", e)
        return False
    logger.info("Cleaned up updater file")
    return True
