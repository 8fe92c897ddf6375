"""
Installer orchestration for the modpack installer.

Coordinates manifest/snapshot fetching, cleanup, planning and downloading
for check, install/update and remove operations. Only one operation runs
at a time; a trigger while another is active is ignored.
"""

import logging
import shutil
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Callable, Optional

import requests

from ..config import InstallerConfig, ProtectList
from ..constants import INSTALLER_VERSION
from ..core.formatting import format_size
from ..core.files import is_within
from ..core.paths import is_installed
from ..core.progress import ProgressListener, ProgressTracker
from ..exceptions import FetchFailure, InstallerError, SnapshotDegraded
from ..manifest import Manifest, ServerSnapshot, fetch_manifest, fetch_snapshot
from .download_planner import DownloadTask, has_updates, plan_downloads
from .downloader import FileDownloader, RetryPolicy
from .purge_planner import plan_cleanup
from .purger import PurgeResult, delete_files

logger = logging.getLogger(__name__)


class InstallerState(Enum):
    IDLE = "idle"
    CHECKING_UPDATES = "checking_updates"
    INSTALLING = "installing"
    REMOVING = "removing"
    COMPLETED = "completed"
    FAILED = "failed"


class InstallLabel(Enum):
    """What the installer currently knows about the target directory."""
    UNKNOWN = "unknown"
    NOT_INSTALLED = "not_installed"
    UP_TO_DATE = "up_to_date"
    UPDATES_AVAILABLE = "updates_available"


@dataclass
class InstallOutcome:
    """Result of one install/update run."""
    success: bool
    is_update: bool
    downloaded: int = 0
    total: int = 0
    bytes_downloaded: int = 0
    purge: PurgeResult = field(default_factory=PurgeResult)
    snapshot_degraded: bool = False
    error: Optional[str] = None

    @property
    def state(self) -> InstallerState:
        return InstallerState.COMPLETED if self.success else InstallerState.FAILED


def create_directories(manifest: Manifest, target_dir: Path) -> int:
    """
    Create every manifest-declared directory under target_dir.

    Entries that would resolve outside target_dir are skipped.

    Returns number of directories ensured.
    """
    created = 0
    for rel in manifest.directories:
        path = target_dir / rel
        if not is_within(path, target_dir):
            logger.warning("Skipping directory outside the installation: %s", rel)
            continue
        path.mkdir(parents=True, exist_ok=True)
        created += 1
    return created


class ModpackInstaller:
    """
    Drives check / install / update / remove against one target directory.

    Manifest and snapshot are immutable values replaced wholesale on each
    fetch. Blocking work can be pushed to a single background worker with
    the *_async methods; progress flows back through the ProgressListener.
    """

    def __init__(
        self,
        config: Optional[InstallerConfig] = None,
        listener: Optional[ProgressListener] = None,
        downloader: Optional[FileDownloader] = None,
        manifest_fetcher: Optional[Callable[[], Manifest]] = None,
        snapshot_fetcher: Optional[Callable[[], ServerSnapshot]] = None,
    ):
        """
        Initialize the installer.

        Args:
            config: Session settings (URLs, profile, game directory)
            listener: Receives progress/status events
            downloader: File downloader (built from config if omitted)
            manifest_fetcher: Zero-arg callable returning a Manifest
            snapshot_fetcher: Zero-arg callable returning a ServerSnapshot
        """
        self.config = config or InstallerConfig()
        self.listener = listener or ProgressListener()
        self.progress = ProgressTracker(self.listener)

        self._session = requests.Session()
        self.downloader = downloader or FileDownloader(
            session=self._session,
            retry_policy=RetryPolicy(self.config.max_attempts, self.config.backoff_step),
            timeout=self.config.timeout,
            verify_hashes=self.config.verify_hashes,
        )
        self._fetch_manifest = manifest_fetcher or partial(
            fetch_manifest,
            self.config.manifest_url,
            self._session,
            self.config.local_manifest,
        )
        self._fetch_snapshot = snapshot_fetcher or partial(
            fetch_snapshot, self.config.snapshot_url, self._session
        )

        self.manifest: Optional[Manifest] = None
        self.snapshot: Optional[ServerSnapshot] = None
        self.state = InstallerState.IDLE
        self.label = InstallLabel.UNKNOWN
        self.last_outcome: Optional[InstallOutcome] = None

        self._guard = threading.Lock()
        self._busy = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="installer")

    # ------------------------------------------------------------------
    # Single-flight guard
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        with self._guard:
            return self._busy

    @property
    def target_dir(self) -> Path:
        return self.config.target_dir

    def _begin(self, state: InstallerState) -> bool:
        with self._guard:
            if self._busy:
                logger.debug("Ignoring %s request: another operation is running", state.value)
                return False
            self._busy = True
            self.state = state
        logger.debug("State -> %s", state.value)
        return True

    def _end(self):
        with self._guard:
            self._busy = False
            self.state = InstallerState.IDLE
        logger.debug("State -> idle")

    def _run_guarded(self, fn: Callable):
        try:
            return fn()
        finally:
            self._end()

    def _submit(self, state: InstallerState, fn: Callable) -> Optional[Future]:
        if not self._begin(state):
            return None
        return self._executor.submit(self._run_guarded, fn)

    def _status(self, text: str):
        self.progress.status(text)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def load_manifest(self) -> Optional[Manifest]:
        """
        Fetch the manifest and announce it.

        Returns None (with a status message) if it could not be loaded.
        """
        try:
            manifest = self._fetch_manifest()
        except FetchFailure as e:
            logger.error("Failed to load config: %s", e.reason)
            self._status("Failed to load configuration")
            return None

        self.manifest = manifest
        version = manifest.version or "Unknown"
        logger.info("Installer version: %s, Latest: %s", INSTALLER_VERSION, manifest.installer.version or "Unknown")
        self._status(f"Ready to install v{version}")

        if manifest.installer_update_available(INSTALLER_VERSION):
            logger.info("Installer update available: %s", manifest.installer.version)
            self.listener.on_installer_update(manifest.installer.version, manifest.installer.download_url)
        return manifest

    def _require_manifest(self) -> Manifest:
        if self.manifest is None and self.load_manifest() is None:
            raise FetchFailure("configuration", "manifest not loaded")
        return self.manifest

    def _refresh_snapshot(self, degradable: bool = False) -> ServerSnapshot:
        """
        Fetch a fresh snapshot, replacing the previous one.

        Raises:
            SnapshotDegraded: fetch failed and degradable is set
            FetchFailure: fetch failed otherwise
        """
        try:
            snapshot = self._fetch_snapshot()
        except FetchFailure as e:
            self.snapshot = None
            if degradable:
                raise SnapshotDegraded(e.reason) from e
            raise
        self.snapshot = snapshot
        return snapshot

    # ------------------------------------------------------------------
    # Check
    # ------------------------------------------------------------------

    def _check(self, startup: bool = False) -> Optional[bool]:
        try:
            manifest = self._require_manifest()
        except FetchFailure:
            return None

        if not startup:
            self._status("Checking for updates...")
            logger.info("Checking for updates...")

        try:
            snapshot = self._refresh_snapshot()
        except FetchFailure as e:
            # Without timestamps an install can still repair missing files
            logger.warning("Failed to load server file info for update check: %s", e.reason)
            found = True
        else:
            try:
                found = has_updates(manifest, snapshot, self.target_dir, self.config.profile)
            except OSError as e:
                logger.warning("Error checking for updates: %s", e)
                found = True

        if found:
            self.label = InstallLabel.UPDATES_AVAILABLE
            self._status("Updates available")
            logger.info("Updates found - ready to install")
        else:
            self.label = InstallLabel.UP_TO_DATE
            self._status("Modpack up to date" if startup else "No updates found")
            logger.info("No updates found - modpack is up to date")
        return found

    def check_for_updates(self) -> Optional[bool]:
        """
        Refetch the snapshot and report whether anything needs downloading.

        Never touches the filesystem. Returns None if another operation
        is running or the manifest is unavailable.
        """
        if not self._begin(InstallerState.CHECKING_UPDATES):
            return None
        return self._run_guarded(self._check)

    def check_for_updates_async(self) -> Optional[Future]:
        return self._submit(InstallerState.CHECKING_UPDATES, self._check)

    def refresh(self) -> Optional[bool]:
        """
        Re-derive the label for the current target directory.

        An existing install (mods/ and config/ present) is checked for
        updates; otherwise the target is reported as ready to install.
        """
        if not is_installed(self.target_dir):
            self.label = InstallLabel.NOT_INSTALLED
            self._status("Ready to install")
            return None
        if not self._begin(InstallerState.CHECKING_UPDATES):
            return None
        return self._run_guarded(partial(self._check, startup=True))

    def startup(self) -> Optional[Manifest]:
        """Load the manifest, then settle the label for the target directory."""
        manifest = self.load_manifest()
        if manifest is not None:
            self.refresh()
        return manifest

    def startup_async(self) -> Future:
        return self._executor.submit(self.startup)

    # ------------------------------------------------------------------
    # Install / update
    # ------------------------------------------------------------------

    def _download_all(self, tasks: list[DownloadTask], outcome: InstallOutcome):
        self.progress.start(len(tasks))
        outcome.total = len(tasks)
        self._status("Downloading mods...")
        for task in tasks:
            self.progress.begin_file(task.filename)
            result = self.downloader.download_or_raise(task.url, task.local_path, task.sha1)
            self.progress.file_completed()
            outcome.downloaded += 1
            outcome.bytes_downloaded += result.bytes_downloaded

    def _install(self) -> InstallOutcome:
        target_dir = self.target_dir
        is_update = is_installed(target_dir) or self.label is InstallLabel.UPDATES_AVAILABLE
        kind = "update" if is_update else "installation"
        outcome = InstallOutcome(success=False, is_update=is_update)
        logger.info("Starting %s...", kind)

        try:
            manifest = self._require_manifest()

            self._status("Checking file timestamps...")
            try:
                snapshot = self._refresh_snapshot(degradable=True)
            except SnapshotDegraded as e:
                logger.warning("Failed to load server file info, using fallback method: %s", e.reason)
                snapshot = None
                outcome.snapshot_degraded = True

            self._status("Creating directories...")
            target_dir.mkdir(parents=True, exist_ok=True)
            create_directories(manifest, target_dir)

            self._status("Cleaning up old files...")
            protect_list = ProtectList.load(target_dir)
            outcome.purge = delete_files(plan_cleanup(manifest, target_dir, protect_list))
            if outcome.purge.deleted_count:
                logger.info(
                    "Removed %d old file(s) (%s)",
                    outcome.purge.deleted_count, format_size(outcome.purge.deleted_size),
                )

            tasks = plan_downloads(manifest, snapshot, target_dir, self.config.profile)
            self._download_all(tasks, outcome)

            self.progress.finish("Installation completed!")
            self._status("Installation completed!")
            outcome.success = True
        except InstallerError as e:
            outcome.error = str(e)
            logger.error("%s failed: %s", kind.capitalize(), e)
        except Exception as e:
            outcome.error = str(e)
            logger.exception("Installation error: %s", e)

        with self._guard:
            self.state = outcome.state
        self.last_outcome = outcome

        if outcome.success:
            self.label = InstallLabel.UP_TO_DATE
            message = "Modpack updated successfully!" if is_update else "Modpack installed successfully!"
        else:
            self.label = (
                InstallLabel.UPDATES_AVAILABLE if is_installed(target_dir) else InstallLabel.NOT_INSTALLED
            )
            message = "Update failed" if is_update else "Installation failed"
        self._status(message)
        logger.info(message.rstrip("!"))
        return outcome

    def install(self) -> Optional[InstallOutcome]:
        """
        Install or update the modpack.

        Sequence: refetch snapshot (tolerating failure), create manifest
        directories, clean up orphaned mods/configs, plan, then download
        each file in order. The first file that exhausts its retries ends
        the run as failed; files already downloaded stay in place.

        Returns None if another operation is running.
        """
        if not self._begin(InstallerState.INSTALLING):
            return None
        return self._run_guarded(self._install)

    def install_async(self) -> Optional[Future]:
        return self._submit(InstallerState.INSTALLING, self._install)

    def run_primary_action(self) -> Optional[Future]:
        """
        The main button: check when up to date, otherwise install/update.
        """
        if self.label is InstallLabel.UP_TO_DATE:
            return self.check_for_updates_async()
        return self.install_async()

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def _remove(self) -> bool:
        removal_dir = self.config.removal_dir
        if not removal_dir.exists():
            self._status("No modpack found to remove")
            logger.info("No modpack found to remove")
            return False
        try:
            shutil.rmtree(removal_dir)
        except OSError as e:
            self._status("Failed to remove modpack")
            logger.error("Failed to remove modpack: %s", e)
            return False

        self.label = InstallLabel.NOT_INSTALLED
        self._status("Modpack removed successfully")
        logger.info("Modpack removed successfully")
        return True

    def remove(self) -> Optional[bool]:
        """
        Delete the whole installation subtree. Confirmation is the caller's job.

        Returns None if another operation is running.
        """
        if not self._begin(InstallerState.REMOVING):
            return None
        return self._run_guarded(self._remove)

    def remove_async(self) -> Optional[Future]:
        return self._submit(InstallerState.REMOVING, self._remove)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_minecraft_dir(self, minecraft_dir: Path):
        """Point at a different game directory (takes effect on next refresh)."""
        self.config.minecraft_dir = minecraft_dir
        self.label = InstallLabel.UNKNOWN

    def set_profile(self, profile: str):
        self.config.profile = profile
        self.label = InstallLabel.UNKNOWN

    def shutdown(self, wait: bool = True):
        """Stop the background worker and close the HTTP session."""
        self._executor.shutdown(wait=wait)
        self._session.close()
