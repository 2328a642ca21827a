"""
Tests for the archive cache.

Covers cache path layout, sidecar reading, atomic writes and etag
revalidation in fetch_cached().
"""
from __future__ import annotations

import json

import pytest

from remote_templates.errors import DownloadFailedError, TemplateNetworkError
from remote_templates.models import TemplateDescriptor
from remote_templates.storage.cache import (
    CacheEntry,
    cache_path_for,
    fetch_cached,
    read_cache_entry,
    write_stream_atomically,
)

URL = "https://example.com/t.tar.gz"


def _leftovers(directory):
    return [p.name for p in directory.iterdir() if p.name.endswith(".tmp")]


class TestCachePath:

    def test_layout(self, tmp_path):
        descriptor = TemplateDescriptor(name="unjs-template", tar_url=URL, version="v1")
        assert cache_path_for(tmp_path, "github", descriptor) == tmp_path / "github" / "unjs-template" / "v1.tar.gz"

    def test_name_used_without_version(self, tmp_path):
        descriptor = TemplateDescriptor(name="starter", tar_url=URL)
        assert cache_path_for(tmp_path, "https", descriptor) == tmp_path / "https" / "starter" / "starter.tar.gz"

    def test_version_with_slash_stays_one_segment(self, tmp_path):
        descriptor = TemplateDescriptor(name="unjs-template", tar_url=URL, version="feature/x")
        path = cache_path_for(tmp_path, "github", descriptor)

        assert path.parent == tmp_path / "github" / "unjs-template"
        assert path.name == "feature%2Fx.tar.gz"

    def test_version_cannot_escape_cache(self, tmp_path):
        descriptor = TemplateDescriptor(name="x", tar_url=URL, version="../../etc")
        path = cache_path_for(tmp_path, "github", descriptor)
        assert path.parent == tmp_path / "github" / "x"

    def test_distinct_versions_distinct_paths(self, tmp_path):
        a = cache_path_for(tmp_path, "github", TemplateDescriptor(name="x", tar_url=URL, version="a/b"))
        b = cache_path_for(tmp_path, "github", TemplateDescriptor(name="x", tar_url=URL, version="a%2Fb"))
        assert a != b


class TestReadCacheEntry:

    def test_missing_sidecar(self, tmp_path):
        entry = read_cache_entry(tmp_path / "a.tar.gz")
        assert entry.etag is None
        assert not entry.exists

    def test_valid_sidecar(self, tmp_path):
        archive = tmp_path / "a.tar.gz"
        archive.write_bytes(b"x")
        (tmp_path / "a.tar.gz.json").write_text(json.dumps({"etag": '"abc"'}))

        entry = read_cache_entry(archive)

        assert entry.etag == '"abc"'
        assert entry.exists
        assert entry.sidecar_path == tmp_path / "a.tar.gz.json"

    @pytest.mark.parametrize("content", ["{not json", "[]", '{"etag": 42}', '"etag"', ""])
    def test_corrupt_sidecar_reads_as_no_etag(self, tmp_path, content):
        (tmp_path / "a.tar.gz.json").write_text(content)
        assert read_cache_entry(tmp_path / "a.tar.gz").etag is None


class TestWriteStreamAtomically:

    def test_writes_and_creates_parents(self, tmp_path):
        target = tmp_path / "deep" / "dir" / "file.bin"
        size = write_stream_atomically(target, [b"abc", b"", b"def"])

        assert size == 6
        assert target.read_bytes() == b"abcdef"
        assert _leftovers(target.parent) == []

    def test_empty_stream_fails(self, tmp_path):
        target = tmp_path / "file.bin"

        with pytest.raises(DownloadFailedError, match="empty response body"):
            write_stream_atomically(target, [])

        assert not target.exists()
        assert _leftovers(tmp_path) == []

    def test_failure_keeps_previous_content(self, tmp_path):
        target = tmp_path / "file.bin"
        target.write_bytes(b"previous")

        def broken():
            yield b"partial"
            raise TemplateNetworkError("connection dropped")

        with pytest.raises(TemplateNetworkError):
            write_stream_atomically(target, broken())

        assert target.read_bytes() == b"previous"
        assert _leftovers(tmp_path) == []


class TestFetchCached:
    """Test etag revalidation against the fake host."""

    def test_first_download(self, tmp_path, host, http):
        host.serve_archive(URL, b"archive-v1", etag='"v1"')
        archive = tmp_path / "cache" / "t.tar.gz"

        assert fetch_cached(URL, archive, http=http) is True

        assert archive.read_bytes() == b"archive-v1"
        assert read_cache_entry(archive).etag == '"v1"'

    def test_same_etag_skips_body(self, tmp_path, host, http):
        host.serve_archive(URL, b"archive-v1", etag='"v1"')
        archive = tmp_path / "t.tar.gz"
        fetch_cached(URL, archive, http=http)

        assert fetch_cached(URL, archive, http=http) is False

        assert len(host.calls("GET", URL)) == 1
        assert len(host.calls("HEAD", URL)) == 2

    def test_changed_etag_downloads_again(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        host.serve_archive(URL, b"archive-v1", etag='"v1"')
        fetch_cached(URL, archive, http=http)

        host.serve_archive(URL, b"archive-v2", etag='"v2"')
        assert fetch_cached(URL, archive, http=http) is True

        assert archive.read_bytes() == b"archive-v2"
        assert read_cache_entry(archive).etag == '"v2"'

    def test_missing_archive_with_matching_sidecar_downloads(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        (tmp_path / "t.tar.gz.json").write_text(json.dumps({"etag": '"v1"'}))
        host.serve_archive(URL, b"archive-v1", etag='"v1"')

        assert fetch_cached(URL, archive, http=http) is True
        assert archive.exists()

    def test_no_etag_always_downloads(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        host.serve_archive(URL, b"archive")

        assert fetch_cached(URL, archive, http=http) is True
        assert fetch_cached(URL, archive, http=http) is True

        assert len(host.calls("GET", URL)) == 2
        assert not CacheEntry(archive).sidecar_path.exists()

    def test_etag_from_get_when_head_fails(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        host.route("HEAD", URL, status=405)
        host.route("GET", URL, content=b"archive", headers={"etag": '"g1"'})

        fetch_cached(URL, archive, http=http)

        assert read_cache_entry(archive).etag == '"g1"'

    def test_headers_forwarded(self, tmp_path, host, http):
        host.serve_archive(URL, b"archive")
        fetch_cached(URL, tmp_path / "t.tar.gz", http=http, headers={"Authorization": "Bearer secret"})

        assert host.calls("HEAD", URL)[0].headers["Authorization"] == "Bearer secret"
        assert host.calls("GET", URL)[0].headers["Authorization"] == "Bearer secret"

    def test_http_error_keeps_previous_archive(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        archive.write_bytes(b"previous")
        host.route("GET", URL, status=500)

        with pytest.raises(DownloadFailedError, match="500"):
            fetch_cached(URL, archive, http=http)

        assert archive.read_bytes() == b"previous"

    def test_empty_body_fails(self, tmp_path, host, http):
        archive = tmp_path / "t.tar.gz"
        host.serve_archive(URL, b"")

        with pytest.raises(DownloadFailedError, match="empty response body"):
            fetch_cached(URL, archive, http=http)

        assert not archive.exists()

    def test_network_error(self, tmp_path, host, http):
        host.fail(URL)

        with pytest.raises(TemplateNetworkError):
            fetch_cached(URL, tmp_path / "t.tar.gz", http=http)
