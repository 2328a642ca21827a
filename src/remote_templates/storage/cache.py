"""
Archive cache with conditional revalidation.

A cache entry is a pair of files: the archive blob and a JSON sidecar
(``<archive>.json``) holding the etag of the last download. Both are replaced
by write-then-rename, so readers never observe a partially written file.
There is no locking; concurrent writers race, last rename wins.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union
from urllib.parse import quote

from ..errors import DownloadFailedError
from ..http_client import TemplateHTTP
from ..models import TemplateDescriptor

__all__ = [
    "CacheEntry",
    "cache_path_for",
    "read_cache_entry",
    "fetch_cached",
    "write_stream_atomically",
]

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".json"
ARCHIVE_SUFFIX = ".tar.gz"


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached archive and its revalidation token.

    Attributes:
        archive_path: Location of the archive blob
        etag: Etag recorded for the blob, None when unknown
    """
    archive_path: Path
    etag: Optional[str] = None

    @property
    def sidecar_path(self) -> Path:
        return self.archive_path.with_name(self.archive_path.name + SIDECAR_SUFFIX)

    @property
    def exists(self) -> bool:
        return self.archive_path.is_file()


def cache_path_for(cache_dir: Union[str, Path], provider: str, descriptor: TemplateDescriptor) -> Path:
    """
    Cache location of a descriptor's archive.

    ``<cache_dir>/<provider>/<name>/<version or name>.tar.gz``. The version is
    percent-encoded so refs like ``feature/x`` stay one path segment; the
    encoding is injective, so equal (provider, name, version) triples always
    share one artifact.

    Args:
        cache_dir: Cache root
        provider: Provider name
        descriptor: Sanitized descriptor

    Examples:
        >>> cache_path_for("/c", "github", TemplateDescriptor(name="o-r", tar_url="u", version="v1"))
        PosixPath('/c/github/o-r/v1.tar.gz')
    """
    file_stem = quote(descriptor.version or descriptor.name, safe="")
    return Path(cache_dir) / quote(provider, safe="") / descriptor.name / f"{file_stem}{ARCHIVE_SUFFIX}"


def read_cache_entry(archive_path: Union[str, Path]) -> CacheEntry:
    """
    Read the sidecar for an archive path.

    A missing or corrupt sidecar reads as "no etag"; this never fails.
    """
    entry = CacheEntry(archive_path=Path(archive_path))
    try:
        data = json.loads(entry.sidecar_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"No usable cache metadata at {entry.sidecar_path}: {e}")
        return entry

    etag = data.get("etag") if isinstance(data, dict) else None
    return CacheEntry(archive_path=entry.archive_path, etag=etag if isinstance(etag, str) else None)


def write_stream_atomically(target_path: Path, chunks: Iterable[bytes]) -> int:
    """
    Stream content to a file with an atomic rename.

    Content is written to a temp file in the target's directory and renamed
    over the target only after the stream completed. On any failure the temp
    file is removed and the previous target is left untouched.

    Args:
        target_path: Final path for the file
        chunks: Iterable of byte chunks

    Returns:
        Number of bytes written

    Raises:
        DownloadFailedError: If the stream produced no bytes
        OSError: If file operations fail
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(prefix=f".{target_path.name}.", suffix=".tmp", dir=target_path.parent)
    temp_path = Path(temp_name)

    try:
        size = 0
        with os.fdopen(fd, "wb") as out:
            for chunk in chunks:
                size += len(chunk)
                out.write(chunk)
            out.flush()

        if size == 0:
            raise DownloadFailedError(f"Failed to download {target_path.name}: empty response body")

        os.replace(temp_path, target_path)
        return size

    except Exception:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise


def _write_sidecar(entry: CacheEntry) -> None:
    payload = json.dumps({"etag": entry.etag}).encode("utf-8")
    write_stream_atomically(entry.sidecar_path, [payload])


def fetch_cached(
    url: str,
    archive_path: Union[str, Path],
    *,
    http: TemplateHTTP,
    headers: Optional[Mapping[str, str]] = None,
) -> bool:
    """
    Make ``archive_path`` hold the current content of ``url``.

    1. Read the stored etag (missing/corrupt sidecar means none).
    2. HEAD the URL; a transport failure leaves revalidation unknown.
    3. Same etag and archive on disk: done, no body transfer.
    4. Otherwise GET and stream the body to the archive atomically.
    5. Record the new etag, if the server sent one.

    Args:
        url: Archive URL
        archive_path: Cache file location
        http: HTTP client
        headers: Request headers (auth, content negotiation)

    Returns:
        True if the body was downloaded, False if the cached copy was current

    Raises:
        DownloadFailedError: On status >= 400 or an empty body
        TemplateNetworkError: If the GET could not be performed
    """
    cached = read_cache_entry(archive_path)

    head = http.try_head(url, headers=headers)
    etag = head.headers.get("etag") if head is not None and head.status_code < 400 else None

    if etag is not None and etag == cached.etag and cached.exists:
        logger.debug(f"Cache hit for {url} (etag {etag})")
        return False

    with http.stream(url, headers=headers) as response:
        if response.status_code >= 400:
            raise DownloadFailedError(
                f"Failed to download {url}: {response.status_code} {response.reason_phrase}"
            )
        etag = etag or response.headers.get("etag")
        size = write_stream_atomically(cached.archive_path, response.iter_bytes())

    logger.info(f"Downloaded {url} to {cached.archive_path} ({size} bytes)")

    if etag is not None:
        _write_sidecar(CacheEntry(archive_path=cached.archive_path, etag=etag))
    return True
