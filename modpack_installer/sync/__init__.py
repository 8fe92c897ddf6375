"""
Sync operations module.

Handles download planning, cleanup, file downloading, and orchestration.
"""

from .download_planner import DownloadTask, has_updates, needs_fetch, plan_downloads
from .purge_planner import PurgeItem, count_purgeable, plan_cleanup
from .purger import PurgeResult, delete_files
from .downloader import AttemptOutcome, AttemptStatus, DownloadResult, FileDownloader, RetryPolicy
from .installer import InstallLabel, InstallOutcome, InstallerState, ModpackInstaller, create_directories

__all__ = [
    # Download planning
    "DownloadTask",
    "has_updates",
    "needs_fetch",
    "plan_downloads",
    # Cleanup planning
    "PurgeItem",
    "count_purgeable",
    "plan_cleanup",
    # Purger
    "PurgeResult",
    "delete_files",
    # Downloader
    "AttemptOutcome",
    "AttemptStatus",
    "DownloadResult",
    "FileDownloader",
    "RetryPolicy",
    # Orchestration
    "InstallLabel",
    "InstallOutcome",
    "InstallerState",
    "ModpackInstaller",
    "create_directories",
]
