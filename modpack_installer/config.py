"""
Configuration for the modpack installer.

- InstallerConfig: where to fetch documents from, which profile to install,
  and where the game lives (overridable from the environment)
- ProtectList: dontdelete.txt at the installation root, listing files the
  cleanup pass must never remove
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .constants import (
    BACKOFF_STEP,
    CONNECT_TIMEOUT,
    DEFAULT_PROFILE,
    MANIFEST_URL,
    MAX_ATTEMPTS,
    PROTECT_LIST_FILENAME,
    READ_TIMEOUT,
    SNAPSHOT_URL,
    UPDATER_URL,
)
from .core.formatting import to_posix
from .core.paths import get_default_minecraft_dir, get_removal_dir, get_target_dir

logger = logging.getLogger(__name__)


@dataclass
class InstallerConfig:
    """Settings for one installer session."""
    manifest_url: str = MANIFEST_URL
    snapshot_url: str = SNAPSHOT_URL
    updater_url: str = UPDATER_URL
    profile: str = DEFAULT_PROFILE
    minecraft_dir: Path = field(default_factory=get_default_minecraft_dir)
    local_manifest: Optional[Path] = None
    connect_timeout: int = CONNECT_TIMEOUT
    read_timeout: int = READ_TIMEOUT
    max_attempts: int = MAX_ATTEMPTS
    backoff_step: float = BACKOFF_STEP
    verify_hashes: bool = True

    @property
    def target_dir(self) -> Path:
        return get_target_dir(self.minecraft_dir, self.profile)

    @property
    def removal_dir(self) -> Path:
        return get_removal_dir(self.minecraft_dir, self.profile)

    @property
    def timeout(self) -> tuple[int, int]:
        return self.connect_timeout, self.read_timeout

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "InstallerConfig":
        """
        Build a config with environment overrides.

        Recognized variables:
            MODPACK_MANIFEST_URL, MODPACK_SNAPSHOT_URL, MODPACK_UPDATER_URL,
            MODPACK_PROFILE, MODPACK_MINECRAFT_DIR
        """
        env = os.environ if environ is None else environ
        config = cls()
        config.manifest_url = env.get("MODPACK_MANIFEST_URL", config.manifest_url)
        config.snapshot_url = env.get("MODPACK_SNAPSHOT_URL", config.snapshot_url)
        config.updater_url = env.get("MODPACK_UPDATER_URL", config.updater_url)
        config.profile = env.get("MODPACK_PROFILE", config.profile).strip().lower() or DEFAULT_PROFILE
        mc_dir = env.get("MODPACK_MINECRAFT_DIR", "")
        if mc_dir:
            config.minecraft_dir = Path(mc_dir).expanduser()
        return config


class ProtectList:
    """
    Relative paths the cleanup pass must never delete.

    Entries are exact matches (not globs) relative to the managed
    subtree they live in, e.g. "mymod.jar" under mods/ or
    "ui/opts.json" under config/.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._paths = frozenset(to_posix(p) for p in paths)

    @classmethod
    def parse(cls, text: str) -> "ProtectList":
        """Parse file contents: blank lines and "#" comments are ignored."""
        paths = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            paths.append(line)
        return cls(paths)

    @classmethod
    def load(cls, target_dir: Path) -> "ProtectList":
        """Load dontdelete.txt from the installation root (empty if absent)."""
        path = target_dir / PROTECT_LIST_FILENAME
        if not path.exists():
            return cls()
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Failed to read %s: %s", PROTECT_LIST_FILENAME, e)
            return cls()
        protect_list = cls.parse(text)
        if protect_list:
            logger.info("Protecting %d file(s) listed in %s", len(protect_list), PROTECT_LIST_FILENAME)
        return protect_list

    def __contains__(self, rel_path: str) -> bool:
        return to_posix(rel_path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __repr__(self) -> str:
        return f"ProtectList({sorted(self._paths)!r})"
