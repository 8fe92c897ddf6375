"""
Tests for manifest parsing and entry resolution.
"""

import json

import pytest

from modpack_installer.manifest import EntryKind, Manifest, ServerSnapshot
from _helpers import category_file, core_file, custom_mod, make_manifest, manifest_dict, modrinth_mod


class TestManifestParsing:
    """Building a Manifest from the JSON document."""

    def test_minimal_document(self):
        manifest = Manifest.from_dict({})
        assert manifest.total_entries == 0
        assert manifest.version == ""
        assert list(manifest.all_entries()) == []

    def test_metadata(self):
        manifest = make_manifest()
        assert manifest.version == "2.4"
        assert manifest.modpack_info.loader == "fabric"
        assert manifest.installer.version == "1.0.31"
        assert manifest.base_download == "https://example.com/mpack/"

    def test_unknown_fields_ignored(self):
        data = manifest_dict(modrinth_mods=[modrinth_mod("sodium-0.5.jar", extra_field=1)])
        data["future_section"] = {"anything": True}
        manifest = Manifest.from_dict(data)
        assert manifest.modrinth_mods[0].filename == "sodium-0.5.jar"

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            Manifest.from_dict(["not", "a", "manifest"])

    def test_list_must_hold_objects(self):
        with pytest.raises(ValueError):
            Manifest.from_dict(manifest_dict(config_files=["opts.json"]))

    def test_entry_missing_filename(self):
        bad = custom_mod("x.jar")
        del bad["filename"]
        with pytest.raises(ValueError, match="filename"):
            Manifest.from_dict(manifest_dict(custom_mods=[bad]))

    def test_load_from_file(self, temp_dir):
        path = temp_dir / "manifest.json"
        path.write_text(json.dumps(manifest_dict(shader_packs=[category_file("BSL.zip", category="shaders")])))
        manifest = Manifest.load(path)
        assert [e.filename for e in manifest.category_entries("shaderpacks")] == ["BSL.zip"]

    def test_backslash_target_path(self):
        manifest = make_manifest(config_files=[category_file("opts.json", target_path="ui\\sub\\")])
        entry = manifest.category_entries("config")[0]
        assert entry.target_path == "ui/sub"
        assert entry.canonical_path == "config/ui/sub/opts.json"


class TestCanonicalPaths:
    """Canonical keys are category/target_path/filename."""

    def test_registry_mod(self):
        entry = make_manifest(modrinth_mods=[modrinth_mod("lithium-1.2.jar")]).modrinth_mods[0]
        assert entry.kind is EntryKind.MODRINTH
        assert entry.canonical_path == "mods/lithium-1.2.jar"
        assert not entry.uses_timestamp

    def test_custom_mod_with_target_path(self):
        entry = make_manifest(custom_mods=[custom_mod("extra.jar", target_path="addons")]).custom_mods[0]
        assert entry.canonical_path == "mods/addons/extra.jar"
        assert entry.relative_path == "addons/extra.jar"
        assert entry.uses_timestamp

    def test_category_roots(self):
        manifest = make_manifest(
            config_files=[category_file("a.json")],
            resource_packs=[category_file("pack.zip")],
            fabric_files=[category_file("loader.json")],
            data_files=[category_file("d.dat")],
            native_files=[category_file("lib.so")],
        )
        paths = [e.canonical_path for e in manifest.all_entries()]
        assert paths == [
            "config/a.json",
            "resourcepacks/pack.zip",
            ".fabric/loader.json",
            "data/d.dat",
            "natives/lib.so",
        ]

    def test_core_file_at_root(self, temp_dir):
        entry = make_manifest(core_files=[core_file("PokeCubed.json", ["tlauncher"])]).core_files[0]
        assert entry.canonical_path == "PokeCubed.json"
        assert entry.local_path(temp_dir) == temp_dir / "PokeCubed.json"

    def test_local_path_nested(self, temp_dir):
        entry = make_manifest(config_files=[category_file("opts.json", target_path="ui")]).category_entries("config")[0]
        assert entry.local_path(temp_dir) == temp_dir / "config" / "ui" / "opts.json"


class TestIterEntries:
    """Processing order and profile gating."""

    def test_processing_order(self, temp_dir):
        manifest = make_manifest(
            core_files=[core_file("core.json", ["both"])],
            native_files=[category_file("lib.so")],
            config_files=[category_file("c.json")],
            custom_mods=[custom_mod("custom.jar")],
            modrinth_mods=[modrinth_mod("reg-1.0.jar")],
            shader_packs=[category_file("s.zip")],
        )
        names = [r.entry.filename for r in manifest.iter_entries(temp_dir, "tlauncher")]
        assert names == ["reg-1.0.jar", "custom.jar", "c.json", "s.zip", "lib.so", "core.json"]

    def test_core_files_gated_by_profile(self, temp_dir):
        manifest = make_manifest(core_files=[
            core_file("tl.json", ["tlauncher"]),
            core_file("vanilla.json", ["vanilla"]),
            core_file("shared.json", ["both"]),
        ])
        tl = [r.entry.filename for r in manifest.iter_entries(temp_dir, "tlauncher")]
        vanilla = [r.entry.filename for r in manifest.iter_entries(temp_dir, "vanilla")]
        assert tl == ["tl.json", "shared.json"]
        assert vanilla == ["vanilla.json", "shared.json"]

    def test_core_file_without_profiles_never_applies(self, temp_dir):
        manifest = make_manifest(core_files=[core_file("orphan.json", [])])
        assert list(manifest.iter_entries(temp_dir, "tlauncher")) == []

    def test_resolved_snapshot_key(self, temp_dir):
        manifest = make_manifest(config_files=[category_file("opts.json", target_path="ui")])
        resolved = next(manifest.iter_entries(temp_dir, "tlauncher"))
        assert resolved.snapshot_key == "config/ui/opts.json"
        assert resolved.local_path == temp_dir / "config" / "ui" / "opts.json"


class TestManifestQueries:

    def test_expected_mod_filenames(self):
        manifest = make_manifest(
            modrinth_mods=[modrinth_mod("a-1.jar")],
            custom_mods=[custom_mod("b.jar", target_path="sub")],
        )
        assert manifest.expected_mod_filenames() == {"a-1.jar", "b.jar"}

    def test_expected_config_paths(self):
        manifest = make_manifest(config_files=[
            category_file("opts.json", target_path="ui"),
            category_file("root.toml"),
        ])
        assert manifest.expected_config_paths() == {"ui/opts.json", "root.toml"}

    def test_get_entry(self):
        manifest = make_manifest(config_files=[category_file("opts.json", target_path="ui")])
        assert manifest.get_entry("config/ui/opts.json").filename == "opts.json"
        assert manifest.get_entry("config/opts.json") is None

    def test_installer_update_requires_force(self):
        data = manifest_dict()
        data["installer"] = {"version": "1.1.0", "download_url": "https://x/new.jar", "force_update": False}
        assert not Manifest.from_dict(data).installer_update_available("1.0.31")
        data["installer"]["force_update"] = True
        assert Manifest.from_dict(data).installer_update_available("1.0.31")
        assert not Manifest.from_dict(data).installer_update_available("1.1.0")


class TestServerSnapshot:
    """Snapshot parsing and lookup."""

    def test_lookup_normalizes_paths(self):
        snapshot = ServerSnapshot.from_dict({
            "timestamp": 5,
            "files": [{"path": "./config\\ui\\opts.json", "modified": 1000}],
        })
        assert snapshot.lookup("config/ui/opts.json").modified == 1000
        assert snapshot.lookup("/config/ui/opts.json") is not None
        assert "config/ui/opts.json" in snapshot
        assert len(snapshot) == 1

    def test_miss_is_none(self):
        snapshot = ServerSnapshot.from_dict({"files": []})
        assert snapshot.lookup("mods/x.jar") is None

    def test_later_duplicate_wins(self):
        snapshot = ServerSnapshot.from_dict({"files": [
            {"path": "mods/a.jar", "modified": 1},
            {"path": "mods/a.jar", "modified": 2},
        ]})
        assert snapshot.lookup("mods/a.jar").modified == 2

    def test_missing_modified_is_unknown(self):
        snapshot = ServerSnapshot.from_dict({"files": [{"path": "mods/a.jar"}]})
        assert snapshot.lookup("mods/a.jar").modified == 0

    def test_bad_shapes(self):
        with pytest.raises(ValueError):
            ServerSnapshot.from_dict("nope")
        with pytest.raises(ValueError):
            ServerSnapshot.from_dict({"files": {"path": "x"}})
        with pytest.raises(ValueError):
            ServerSnapshot.from_dict({"files": [{"modified": 1}]})
