"""
PokeCubed modpack installer.

Keeps a local Minecraft instance in sync with a remotely published
modpack manifest.

Import from submodules directly:
    from modpack_installer.config import InstallerConfig, ProtectList
    from modpack_installer.manifest import Manifest, ServerSnapshot
    from modpack_installer.sync import ModpackInstaller
"""


def _get_version():
    """Read version from VERSION file."""
    from pathlib import Path
    from .core.paths import get_app_dir
    # Try relative to this file first (source), then app dir (frozen build)
    for base in [Path(__file__).parent.parent, get_app_dir()]:
        version_file = base / "VERSION"
        if version_file.exists():
            return version_file.read_text().strip()
    from .constants import INSTALLER_VERSION
    return INSTALLER_VERSION


__version__ = _get_version()
