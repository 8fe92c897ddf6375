"""
Tests for manifest and snapshot fetching.
"""

import json

import pytest
import requests

from modpack_installer.exceptions import FetchFailure
from modpack_installer.manifest import fetch_manifest, fetch_snapshot
from _helpers import FakeResponse, FakeSession, manifest_dict, modrinth_mod


class TestFetchManifest:

    def test_remote(self):
        session = FakeSession(FakeResponse(json_data=manifest_dict(modrinth_mods=[modrinth_mod("a-1.jar")])))
        manifest = fetch_manifest("https://example.com/manifest.json", session)
        assert manifest.modrinth_mods[0].filename == "a-1.jar"
        assert session.calls[0][0] == "https://example.com/manifest.json"

    def test_local_file(self, temp_dir):
        path = temp_dir / "manifest.json"
        path.write_text(json.dumps(manifest_dict()))
        session = FakeSession(requests.ConnectionError("should not be used"))
        assert fetch_manifest(session=session, local_path=path).version == "2.4"
        assert session.calls == []

    def test_local_file_missing(self, temp_dir):
        with pytest.raises(FetchFailure):
            fetch_manifest(local_path=temp_dir / "nope.json")

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=404))
        with pytest.raises(FetchFailure) as exc_info:
            fetch_manifest("https://example.com/manifest.json", session)
        assert exc_info.value.reason == "HTTP 404"
        assert exc_info.value.document == "configuration"

    def test_offline(self):
        session = FakeSession(requests.ConnectionError("dns"))
        with pytest.raises(FetchFailure, match="no internet connection"):
            fetch_manifest("https://example.com/manifest.json", session)

    def test_timeout(self):
        session = FakeSession(requests.Timeout("slow"))
        with pytest.raises(FetchFailure, match="timed out"):
            fetch_manifest("https://example.com/manifest.json", session)

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(b"<html>"))
        with pytest.raises(FetchFailure):
            fetch_manifest("https://example.com/manifest.json", session)

    def test_wrong_shape(self):
        session = FakeSession(FakeResponse(json_data=[1, 2, 3]))
        with pytest.raises(FetchFailure):
            fetch_manifest("https://example.com/manifest.json", session)


class TestFetchSnapshot:

    def test_remote(self):
        data = {"timestamp": 1, "files": [{"path": "config/a.json", "modified": 10}]}
        snapshot = fetch_snapshot("https://example.com/files.json", FakeSession(FakeResponse(json_data=data)))
        assert snapshot.lookup("config/a.json").modified == 10

    def test_failure_names_document(self):
        session = FakeSession(FakeResponse(status_code=500))
        with pytest.raises(FetchFailure) as exc_info:
            fetch_snapshot("https://example.com/files.json", session)
        assert exc_info.value.document == "server file info"
