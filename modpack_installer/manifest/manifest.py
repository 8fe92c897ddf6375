"""
Manifest classes for the modpack installer.

The manifest is a JSON document describing every file the installation
should contain, grouped by category, plus the directories to pre-create.
Instances are immutable: a fresh Manifest is built for each fetch.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from ..constants import CATEGORY_LISTS, CONFIG_DIR, MODS_DIR, PROFILE_ANY
from ..core.formatting import join_posix, to_posix


class EntryKind(Enum):
    MODRINTH = "modrinth"  # versioned registry mod, filename encodes version
    CUSTOM_MOD = "custom_mod"
    CATEGORY = "category"  # config/resourcepack/shader/loader/data/native file
    CORE = "core"  # placed at the target root, gated by profile


def _require(data: dict, key: str, context: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{context}: missing '{key}'")
    return value


@dataclass(frozen=True)
class ManifestEntry:
    """A single file in the manifest."""
    kind: EntryKind
    filename: str
    download_url: str
    category: str = ""  # category root on disk ("" for core files)
    target_path: str = ""  # optional subdirectory under the category root
    size: int = 0
    sha1: str = ""
    declared_category: str = ""  # "category" field as written in the document
    project_id: str = ""
    version_id: str = ""
    name: str = ""
    required_for: tuple[str, ...] = ()

    @property
    def relative_path(self) -> str:
        """Path under the category root, forward slashes."""
        return join_posix(self.target_path, self.filename)

    @property
    def canonical_path(self) -> str:
        """Snapshot lookup key: category/target_path/filename."""
        return join_posix(self.category, self.target_path, self.filename)

    @property
    def uses_timestamp(self) -> bool:
        """Registry mods are checked for existence only."""
        return self.kind is not EntryKind.MODRINTH

    def applies_to(self, profile: str) -> bool:
        if self.kind is not EntryKind.CORE:
            return True
        return profile in self.required_for or PROFILE_ANY in self.required_for

    def local_path(self, target_root: Path) -> Path:
        path = target_root
        for part in self.canonical_path.split("/"):
            path = path / part
        return path

    @classmethod
    def modrinth_from_dict(cls, data: dict) -> "ManifestEntry":
        return cls(
            kind=EntryKind.MODRINTH,
            filename=_require(data, "filename", "modrinth_mods"),
            download_url=_require(data, "download_url", "modrinth_mods"),
            category=MODS_DIR,
            size=data.get("size", 0) or 0,
            sha1=data.get("sha1", "") or "",
            project_id=data.get("project_id", "") or "",
            version_id=data.get("version_id", "") or "",
            name=data.get("name", "") or "",
        )

    @classmethod
    def custom_mod_from_dict(cls, data: dict) -> "ManifestEntry":
        return cls(
            kind=EntryKind.CUSTOM_MOD,
            filename=_require(data, "filename", "custom_mods"),
            download_url=_require(data, "download_url", "custom_mods"),
            category=MODS_DIR,
            target_path=to_posix(data.get("target_path", "") or "").strip("/"),
            size=data.get("size", 0) or 0,
            sha1=data.get("sha1", "") or "",
        )

    @classmethod
    def category_from_dict(cls, data: dict, category: str, list_name: str) -> "ManifestEntry":
        return cls(
            kind=EntryKind.CATEGORY,
            filename=_require(data, "filename", list_name),
            download_url=_require(data, "download_url", list_name),
            category=category,
            target_path=to_posix(data.get("target_path", "") or "").strip("/"),
            size=data.get("size", 0) or 0,
            sha1=data.get("sha1", "") or "",
            declared_category=data.get("category", "") or "",
        )

    @classmethod
    def core_from_dict(cls, data: dict) -> "ManifestEntry":
        return cls(
            kind=EntryKind.CORE,
            filename=_require(data, "filename", "core_files"),
            download_url=_require(data, "download_url", "core_files"),
            size=data.get("size", 0) or 0,
            sha1=data.get("sha1", "") or "",
            required_for=tuple(data.get("required_for", []) or []),
        )


@dataclass(frozen=True)
class ResolvedEntry:
    """A manifest entry paired with its on-disk path and snapshot key."""
    entry: ManifestEntry
    local_path: Path
    snapshot_key: str


@dataclass(frozen=True)
class InstallerInfo:
    """Latest installer release advertised by the manifest."""
    version: str = ""
    download_url: str = ""
    force_update: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "InstallerInfo":
        return cls(
            version=data.get("version", "") or "",
            download_url=data.get("download_url", "") or "",
            force_update=bool(data.get("force_update", False)),
        )


@dataclass(frozen=True)
class ModpackInfo:
    name: str = ""
    version: str = ""
    minecraft_version: str = ""
    loader: str = ""
    loader_version: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ModpackInfo":
        return cls(
            name=data.get("name", "") or "",
            version=data.get("version", "") or "",
            minecraft_version=data.get("minecraft_version", "") or "",
            loader=data.get("loader", "") or "",
            loader_version=data.get("loader_version", "") or "",
        )


def _list_of_dicts(data: dict, key: str) -> list:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"'{key}' must be a list")
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"'{key}' entries must be objects")
    return items


@dataclass(frozen=True)
class Manifest:
    """
    The desired state of an installation.

    Contains:
    - installer: latest installer release info (for self-update)
    - modpack_info: display metadata
    - directories: relative directories to pre-create
    - modrinth_mods / custom_mods: files under mods/
    - categories: (category root, entries) pairs in processing order
    - core_files: files at the target root, gated by profile
    """
    installer: InstallerInfo = field(default_factory=InstallerInfo)
    base_download: str = ""
    modpack_info: ModpackInfo = field(default_factory=ModpackInfo)
    directories: tuple[str, ...] = ()
    modrinth_mods: tuple[ManifestEntry, ...] = ()
    custom_mods: tuple[ManifestEntry, ...] = ()
    categories: tuple[tuple[str, tuple[ManifestEntry, ...]], ...] = ()
    core_files: tuple[ManifestEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Manifest":
        """
        Build a manifest from the parsed JSON document.

        Unknown fields are ignored; missing lists are treated as empty.

        Raises:
            ValueError: if the document is not shaped like a manifest
        """
        if not isinstance(data, dict):
            raise ValueError("manifest must be a JSON object")

        categories = []
        for list_name, category in CATEGORY_LISTS:
            entries = tuple(
                ManifestEntry.category_from_dict(item, category, list_name)
                for item in _list_of_dicts(data, list_name)
            )
            categories.append((category, entries))

        directories = data.get("directories") or []
        if not isinstance(directories, list):
            raise ValueError("'directories' must be a list")

        return cls(
            installer=InstallerInfo.from_dict(data.get("installer") or {}),
            base_download=data.get("base_download", "") or "",
            modpack_info=ModpackInfo.from_dict(data.get("modpack_info") or {}),
            directories=tuple(to_posix(str(d)) for d in directories),
            modrinth_mods=tuple(
                ManifestEntry.modrinth_from_dict(item)
                for item in _list_of_dicts(data, "modrinth_mods")
            ),
            custom_mods=tuple(
                ManifestEntry.custom_mod_from_dict(item)
                for item in _list_of_dicts(data, "custom_mods")
            ),
            categories=tuple(categories),
            core_files=tuple(
                ManifestEntry.core_from_dict(item)
                for item in _list_of_dicts(data, "core_files")
            ),
        )

    @classmethod
    def load(cls, path: Path) -> "Manifest":
        """Load a manifest from a local JSON file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    @property
    def version(self) -> str:
        return self.modpack_info.version

    def category_entries(self, category: str) -> tuple[ManifestEntry, ...]:
        for name, entries in self.categories:
            if name == category:
                return entries
        return ()

    def iter_entries(self, target_root: Path, profile: str) -> Iterator[ResolvedEntry]:
        """
        Yield every applicable entry with its resolved paths.

        Order: registry mods, custom mods, each category list, core files.
        Core files are skipped unless required for this profile (or "both").
        """
        for entry in self.all_entries():
            if not entry.applies_to(profile):
                continue
            yield ResolvedEntry(
                entry=entry,
                local_path=entry.local_path(target_root),
                snapshot_key=entry.canonical_path,
            )

    def all_entries(self) -> Iterator[ManifestEntry]:
        """Every entry regardless of profile, in processing order."""
        yield from self.modrinth_mods
        yield from self.custom_mods
        for _, entries in self.categories:
            yield from entries
        yield from self.core_files

    def expected_mod_filenames(self) -> set[str]:
        """Filenames cleanup must keep under mods/."""
        return {e.filename for e in self.modrinth_mods} | {e.filename for e in self.custom_mods}

    def expected_config_paths(self) -> set[str]:
        """config-relative paths cleanup must keep under config/."""
        return {e.relative_path for e in self.category_entries(CONFIG_DIR)}

    def installer_update_available(self, current_version: str) -> bool:
        """True if the manifest forces a different installer version."""
        latest = self.installer.version
        return bool(latest) and latest != current_version and self.installer.force_update

    @property
    def total_entries(self) -> int:
        count = len(self.modrinth_mods) + len(self.custom_mods) + len(self.core_files)
        return count + sum(len(entries) for _, entries in self.categories)

    def get_entry(self, canonical_path: str) -> Optional[ManifestEntry]:
        """Find an entry by its canonical path."""
        for entry in self.all_entries():
            if entry.canonical_path == canonical_path:
                return entry
        return None
