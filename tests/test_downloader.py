"""
Tests for the file downloader and its retry policy.
"""

import hashlib

import pytest
import requests

from modpack_installer.exceptions import TransferFailure
from modpack_installer.sync.downloader import (
    AttemptOutcome,
    AttemptStatus,
    FileDownloader,
    RetryPolicy,
)
from _helpers import FakeResponse, FakeSession, write_file


def make_downloader(session, **kwargs):
    sleeps = []
    downloader = FileDownloader(session=session, sleep=sleeps.append, **kwargs)
    return downloader, sleeps


class TestRetryPolicy:

    def test_linear_backoff(self):
        policy = RetryPolicy(max_attempts=3, backoff_step=2.0)
        assert [policy.delay_before(k) for k in (1, 2, 3)] == [0.0, 2.0, 4.0]

    def test_stops_on_success(self):
        calls = []

        def attempt(k):
            calls.append(k)
            return AttemptOutcome(AttemptStatus.OK if k == 2 else AttemptStatus.TRANSPORT_ERROR)

        outcome, attempts = RetryPolicy().run(attempt, sleep=lambda s: None)
        assert outcome.ok
        assert attempts == 2
        assert calls == [1, 2]


class TestFileDownloader:

    def test_success(self, temp_dir):
        session = FakeSession(FakeResponse(b"hello"))
        downloader, sleeps = make_downloader(session)
        dest = temp_dir / "mods" / "a.jar"

        result = downloader.download_file("https://example.com/a.jar", dest)

        assert result.success
        assert result.attempts == 1
        assert result.bytes_downloaded == 5
        assert dest.read_bytes() == b"hello"
        assert not (temp_dir / "mods" / "a.jar.part").exists()
        assert sleeps == []

    def test_request_shape(self, temp_dir):
        session = FakeSession(FakeResponse(b"x"))
        downloader, _ = make_downloader(session, timeout=(30, 60))
        downloader.download_file("https://example.com/my mod.jar", temp_dir / "a.jar")

        url, kwargs = session.calls[0]
        assert url == "https://example.com/my%20mod.jar"
        assert kwargs["stream"] is True
        assert kwargs["allow_redirects"] is True
        assert kwargs["timeout"] == (30, 60)
        assert kwargs["headers"]["User-Agent"].startswith("Mozilla/5.0")
        assert kwargs["headers"]["Accept"] == "*/*"
        assert kwargs["headers"]["Accept-Encoding"] == "identity"

    def test_retry_then_success(self, temp_dir):
        session = FakeSession(requests.ConnectionError("reset"), FakeResponse(b"data"))
        downloader, sleeps = make_downloader(session)

        result = downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar")

        assert result.success
        assert result.attempts == 2
        assert sleeps == [2.0]

    def test_exhaustion_raises_transfer_failure(self, temp_dir):
        session = FakeSession(requests.ConnectionError("refused"))
        downloader, sleeps = make_downloader(session)
        dest = temp_dir / "a.jar"

        with pytest.raises(TransferFailure) as exc_info:
            downloader.download_or_raise("https://example.com/a.jar", dest)

        assert exc_info.value.attempts == 3
        assert exc_info.value.url == "https://example.com/a.jar"
        assert len(session.calls) == 3
        assert sleeps == [2.0, 4.0]
        assert not dest.exists()

    def test_http_error_is_retried(self, temp_dir):
        session = FakeSession(FakeResponse(status_code=503), FakeResponse(b"ok"))
        downloader, _ = make_downloader(session)
        result = downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar")
        assert result.success
        assert result.attempts == 2

    def test_size_mismatch_is_retried(self, temp_dir):
        short = FakeResponse(b"abc", headers={"content-length": "10"})
        session = FakeSession(short, FakeResponse(b"0123456789"))
        downloader, _ = make_downloader(session)
        dest = temp_dir / "a.jar"

        result = downloader.download_file("https://example.com/a.jar", dest)

        assert result.success
        assert result.attempts == 2
        assert dest.read_bytes() == b"0123456789"

    def test_compressed_body_skips_length_check(self, temp_dir):
        # Content-Length is the gzip size, the decoded body is longer
        gzipped = FakeResponse(b"x" * 4000, headers={"content-length": "72", "content-encoding": "gzip"})
        downloader, sleeps = make_downloader(FakeSession(gzipped))
        dest = temp_dir / "opts.json"

        result = downloader.download_file("https://example.com/opts.json", dest)

        assert result.success
        assert result.attempts == 1
        assert dest.stat().st_size == 4000
        assert sleeps == []

    def test_missing_content_length_accepted(self, temp_dir):
        session = FakeSession(FakeResponse(b"abc", headers={}))
        downloader, _ = make_downloader(session)
        assert downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar").success

    def test_failed_download_keeps_existing_file(self, temp_dir):
        dest = write_file(temp_dir / "a.jar", b"old contents")
        session = FakeSession(FakeResponse(b"abc", headers={"content-length": "99"}))
        downloader, _ = make_downloader(session)

        result = downloader.download_file("https://example.com/a.jar", dest)

        assert not result.success
        assert dest.read_bytes() == b"old contents"
        assert not (temp_dir / "a.jar.part").exists()


class TestHashVerification:

    def test_matching_sha1(self, temp_dir):
        session = FakeSession(FakeResponse(b"hello"))
        downloader, _ = make_downloader(session)
        sha1 = hashlib.sha1(b"hello").hexdigest().upper()
        assert downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar", sha1).success

    def test_mismatch_exhausts_attempts(self, temp_dir):
        session = FakeSession(FakeResponse(b"tampered"))
        downloader, _ = make_downloader(session)
        sha1 = hashlib.sha1(b"hello").hexdigest()

        result = downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar", sha1)

        assert not result.success
        assert result.attempts == 3
        assert "SHA-1 mismatch" in result.message
        assert not (temp_dir / "a.jar").exists()

    def test_verification_disabled(self, temp_dir):
        session = FakeSession(FakeResponse(b"tampered"))
        downloader, _ = make_downloader(session, verify_hashes=False)
        sha1 = hashlib.sha1(b"hello").hexdigest()
        assert downloader.download_file("https://example.com/a.jar", temp_dir / "a.jar", sha1).success
