"""
Remote manifest and snapshot fetching for the modpack installer.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import certifi
import requests

from ..constants import CONNECT_TIMEOUT, MANIFEST_URL, READ_TIMEOUT, REQUEST_HEADERS, SNAPSHOT_URL
from ..core.formatting import encode_url
from ..exceptions import FetchFailure
from .manifest import Manifest
from .snapshot import ServerSnapshot

logger = logging.getLogger(__name__)


def get_certifi_path() -> str:
    """Get path to certifi CA bundle, handling PyInstaller bundles."""
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        bundled_cert = os.path.join(sys._MEIPASS, 'certifi', 'cacert.pem')
        if os.path.exists(bundled_cert):
            return bundled_cert
    return certifi.where()


def _get_json(
    url: str,
    document: str,
    session: Optional[requests.Session] = None,
    timeout: tuple[int, int] = (CONNECT_TIMEOUT, READ_TIMEOUT),
):
    """GET a JSON document, converting every failure into FetchFailure."""
    http = session or requests
    try:
        response = http.get(
            encode_url(url),
            headers=REQUEST_HEADERS,
            timeout=timeout,
            verify=get_certifi_path(),
        )
        response.raise_for_status()
        return response.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise FetchFailure(document, f"HTTP {status}") from e
    except requests.Timeout as e:
        raise FetchFailure(document, "connection timed out") from e
    except requests.ConnectionError as e:
        raise FetchFailure(document, "no internet connection") from e
    except (requests.RequestException, ValueError) as e:
        raise FetchFailure(document, str(e)) from e


def fetch_manifest(
    url: str = MANIFEST_URL,
    session: Optional[requests.Session] = None,
    local_path: Optional[Path] = None,
) -> Manifest:
    """
    Fetch the modpack manifest from a remote URL or local file.

    Args:
        url: Manifest URL
        session: Optional requests session (shared connection pool)
        local_path: If given, read this JSON file instead of the network

    Raises:
        FetchFailure: the document could not be retrieved or parsed
    """
    if local_path is not None:
        try:
            manifest = Manifest.load(local_path)
        except (OSError, ValueError) as e:
            raise FetchFailure("configuration", str(e)) from e
        logger.info("Loaded local manifest %s", local_path)
        return manifest

    data = _get_json(url, "configuration", session)
    try:
        manifest = Manifest.from_dict(data)
    except ValueError as e:
        raise FetchFailure("configuration", str(e)) from e
    logger.info("Loaded modpack config v%s", manifest.version or "Unknown")
    return manifest


def fetch_snapshot(
    url: str = SNAPSHOT_URL,
    session: Optional[requests.Session] = None,
) -> ServerSnapshot:
    """
    Fetch the server file snapshot (per-path modification times).

    Raises:
        FetchFailure: the document could not be retrieved or parsed
    """
    data = _get_json(url, "server file info", session)
    try:
        snapshot = ServerSnapshot.from_dict(data)
    except ValueError as e:
        raise FetchFailure("server file info", str(e)) from e
    logger.info("Loaded file info for %d server files", len(snapshot))
    return snapshot
