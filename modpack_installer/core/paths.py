"""
Path resolution for the modpack installer.

Where the game lives, where each profile installs to, and where the
running installer package sits (for self-update).
"""

import os
import sys
from pathlib import Path
from typing import Optional

from ..constants import CONFIG_DIR, DEFAULT_PROFILE, MODS_DIR, TLAUNCHER_VERSION_DIR


def get_default_minecraft_dir() -> Path:
    """Platform default .minecraft location."""
    home = Path.home()
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / ".minecraft"
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "minecraft"
    return home / ".minecraft"


def get_target_dir(minecraft_dir: Path, profile: str = DEFAULT_PROFILE) -> Path:
    """
    Installation root for a profile.

    TLauncher installs into its own version folder; other launchers
    share the main game directory.
    """
    if profile == DEFAULT_PROFILE:
        return minecraft_dir / "versions" / TLAUNCHER_VERSION_DIR
    return minecraft_dir


def get_removal_dir(minecraft_dir: Path, profile: str = DEFAULT_PROFILE) -> Path:
    """
    Subtree deleted by "remove modpack".

    For a shared game directory only the mods folder is removed so worlds
    and launcher data survive.
    """
    if profile == DEFAULT_PROFILE:
        return get_target_dir(minecraft_dir, profile)
    return minecraft_dir / MODS_DIR


def is_installed(target_dir: Path) -> bool:
    """An install is recognized by both mods/ and config/ being present."""
    return (target_dir / MODS_DIR).is_dir() and (target_dir / CONFIG_DIR).is_dir()


def get_app_dir() -> Path:
    """Get the directory where the app is located (for user-writable files)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent.parent


def get_current_package_path() -> Optional[Path]:
    """Path of the running installer package, or None when it can't be determined."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable)
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        return None
    path = Path(argv0).resolve()
    return path if path.exists() else None
