"""
Cleanup planning for the modpack installer.

Finds files under the managed subtrees (mods/ and config/) that the
current manifest no longer references. Other category folders
(resourcepacks, shaderpacks, data, natives) may hold user-added content
and are never pruned.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..config import ProtectList
from ..constants import CONFIG_DIR, MANAGED_DIRS, MODS_DIR
from ..core.files import iter_regular_files
from ..core.formatting import relative_posix
from ..manifest import Manifest


@dataclass
class PurgeItem:
    """A local file marked for removal."""
    path: Path
    rel_path: str  # relative to its managed subtree, forward slashes
    category: str
    size: int = 0


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def find_orphaned_mods(manifest: Manifest, target_dir: Path, protect_list: ProtectList) -> List[PurgeItem]:
    """
    Files under mods/ whose filename no manifest mod uses.

    Matching is by filename only (mods may live in target_path subfolders).
    """
    mods_dir = target_dir / MODS_DIR
    expected = manifest.expected_mod_filenames()
    items = []
    for path in iter_regular_files(mods_dir):
        rel_path = relative_posix(path, mods_dir)
        if path.name in expected:
            continue
        if rel_path in protect_list or path.name in protect_list:
            continue
        items.append(PurgeItem(path=path, rel_path=rel_path, category=MODS_DIR, size=_file_size(path)))
    return items


def find_orphaned_configs(manifest: Manifest, target_dir: Path, protect_list: ProtectList) -> List[PurgeItem]:
    """Files under config/ whose config-relative path no manifest config uses."""
    config_dir = target_dir / CONFIG_DIR
    expected = manifest.expected_config_paths()
    items = []
    for path in iter_regular_files(config_dir):
        rel_path = relative_posix(path, config_dir)
        if rel_path in expected or rel_path in protect_list:
            continue
        items.append(PurgeItem(path=path, rel_path=rel_path, category=CONFIG_DIR, size=_file_size(path)))
    return items


# Managed subtree -> orphan finder
_FINDERS = {
    MODS_DIR: find_orphaned_mods,
    CONFIG_DIR: find_orphaned_configs,
}


def plan_cleanup(manifest: Manifest, target_dir: Path, protect_list: ProtectList) -> List[PurgeItem]:
    """
    Plan what files should be removed.

    Args:
        manifest: Desired state
        target_dir: Installation root
        protect_list: Paths the user never wants deleted

    Returns:
        Orphans for each managed subtree, in MANAGED_DIRS order
    """
    items = []
    for category in MANAGED_DIRS:
        items.extend(_FINDERS[category](manifest, target_dir, protect_list))
    return items


def count_purgeable(manifest: Manifest, target_dir: Path, protect_list: ProtectList) -> tuple[int, int]:
    """
    Count files that cleanup would remove.

    Returns:
        Tuple of (total_files, total_size_bytes)
    """
    items = plan_cleanup(manifest, target_dir, protect_list)
    return len(items), sum(item.size for item in items)
