"""
File downloader for the modpack installer.

Downloads one file at a time with a bounded retry policy. Each attempt
streams into a temporary ".part" file next to the destination; the
destination is only replaced once the byte count (and SHA-1, when the
manifest provides one) checks out.
"""

import hashlib
import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple

import requests

from ..constants import (
    BACKOFF_STEP,
    CHUNK_SIZE,
    CONNECT_TIMEOUT,
    MAX_ATTEMPTS,
    READ_TIMEOUT,
    REQUEST_HEADERS,
)
from ..core.formatting import encode_url
from ..exceptions import TransferFailure
from ..manifest import get_certifi_path

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


class AttemptStatus(Enum):
    OK = "ok"
    TRANSPORT_ERROR = "transport_error"  # connection/timeout/HTTP status
    SIZE_MISMATCH = "size_mismatch"
    HASH_MISMATCH = "hash_mismatch"


@dataclass
class AttemptOutcome:
    """Result of a single download attempt."""
    status: AttemptStatus
    bytes_written: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is AttemptStatus.OK


@dataclass
class DownloadResult:
    """Result of a single file download (after all attempts)."""
    success: bool
    file_path: Path
    message: str
    attempts: int = 0
    bytes_downloaded: int = 0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with linear backoff.

    Before attempt k (1-based, k >= 2) wait backoff_step * (k - 1) seconds:
    0s, 2s, 4s for the defaults.
    """
    max_attempts: int = MAX_ATTEMPTS
    backoff_step: float = BACKOFF_STEP

    def delay_before(self, attempt: int) -> float:
        if attempt <= 1:
            return 0.0
        return self.backoff_step * (attempt - 1)

    def run(
        self,
        attempt_fn: Callable[[int], AttemptOutcome],
        sleep: Callable[[float], None] = time.sleep,
    ) -> Tuple[AttemptOutcome, int]:
        """
        Call attempt_fn until it succeeds or attempts run out.

        Returns:
            Tuple of (last_outcome, attempts_used)
        """
        outcome = AttemptOutcome(AttemptStatus.TRANSPORT_ERROR, error="not attempted")
        attempt = 0
        for attempt in range(1, self.max_attempts + 1):
            delay = self.delay_before(attempt)
            if delay > 0:
                sleep(delay)
            outcome = attempt_fn(attempt)
            if outcome.ok:
                break
        return outcome, attempt


class FileDownloader:
    """
    Sequential file downloader.

    Sends browser-like headers (some hosts block unknown clients) and
    bounds every request with connect/read timeouts.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: Tuple[int, int] = (CONNECT_TIMEOUT, READ_TIMEOUT),
        chunk_size: int = CHUNK_SIZE,
        verify_hashes: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the downloader.

        Args:
            session: requests session to reuse (created if omitted)
            retry_policy: Attempt count and backoff
            timeout: Request timeout (connect, read)
            chunk_size: Download chunk size in bytes
            verify_hashes: Check SHA-1 against the manifest when one is given
            sleep: Backoff sleep function (injectable for tests)
        """
        self.session = session or requests.Session()
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.verify_hashes = verify_hashes
        self._sleep = sleep

    def _attempt(self, url: str, destination: Path, expected_sha1: str, attempt: int) -> AttemptOutcome:
        """Download once into a .part file and promote it if it checks out."""
        if attempt > 1:
            logger.info("Retry attempt %d for %s", attempt - 1, url)

        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        digest = hashlib.sha1()
        written = 0
        try:
            with self.session.get(
                encode_url(url),
                headers=REQUEST_HEADERS,
                stream=True,
                allow_redirects=True,
                timeout=self.timeout,
                verify=get_certifi_path(),
            ) as response:
                response.raise_for_status()
                content_length = int(response.headers.get("content-length") or 0)
                if response.headers.get("content-encoding", "identity").lower() != "identity":
                    # Length is of the encoded body; iter_content yields decoded bytes
                    content_length = 0
                logger.debug("Expected file size: %d bytes for %s", content_length, destination.name)

                with open(partial, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            digest.update(chunk)
                            written += len(chunk)
        except (requests.RequestException, OSError, ValueError) as e:
            _remove_quietly(partial)
            logger.warning("Download failed: %s", e)
            return AttemptOutcome(AttemptStatus.TRANSPORT_ERROR, written, str(e))

        if content_length > 0 and written != content_length:
            _remove_quietly(partial)
            message = f"downloaded size ({written}) doesn't match expected size ({content_length})"
            logger.warning("%s: %s", destination.name, message)
            return AttemptOutcome(AttemptStatus.SIZE_MISMATCH, written, message)

        if self.verify_hashes and expected_sha1 and digest.hexdigest() != expected_sha1.lower():
            _remove_quietly(partial)
            message = f"SHA-1 mismatch (got {digest.hexdigest()}, expected {expected_sha1.lower()})"
            logger.warning("%s: %s", destination.name, message)
            return AttemptOutcome(AttemptStatus.HASH_MISMATCH, written, message)

        try:
            os.replace(partial, destination)
        except OSError as e:
            _remove_quietly(partial)
            logger.warning("Failed to move %s into place: %s", partial.name, e)
            return AttemptOutcome(AttemptStatus.TRANSPORT_ERROR, written, str(e))

        logger.info("Downloaded %s: %d bytes", destination.name, written)
        return AttemptOutcome(AttemptStatus.OK, written)

    def download_file(self, url: str, destination: Path, expected_sha1: str = "") -> DownloadResult:
        """
        Download a single file with retries.

        Args:
            url: Source URL (spaces and backslashes are normalized)
            destination: Final file path; parent directories are created
            expected_sha1: Hex SHA-1 from the manifest ("" skips the check)

        Returns:
            DownloadResult with success status and message
        """
        destination.parent.mkdir(parents=True, exist_ok=True)

        outcome, attempts = self.retry_policy.run(
            lambda attempt: self._attempt(url, destination, expected_sha1, attempt),
            sleep=self._sleep,
        )

        if outcome.ok:
            return DownloadResult(
                success=True,
                file_path=destination,
                message=f"OK: {destination.name}",
                attempts=attempts,
                bytes_downloaded=outcome.bytes_written,
            )

        logger.error("Failed to download %s after %d attempts: %s", url, attempts, outcome.error)
        return DownloadResult(
            success=False,
            file_path=destination,
            message=f"ERR: {destination.name} - {outcome.error}",
            attempts=attempts,
        )

    def download_or_raise(self, url: str, destination: Path, expected_sha1: str = "") -> DownloadResult:
        """
        Like download_file, but a permanent failure raises.

        Raises:
            TransferFailure: all attempts were exhausted
        """
        result = self.download_file(url, destination, expected_sha1)
        if not result.success:
            raise TransferFailure(url, destination, result.attempts, result.message)
        return result


def _remove_quietly(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug("Could not remove partial file %s: %s", path, e)
