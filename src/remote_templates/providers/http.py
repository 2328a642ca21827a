"""
Plain URL provider.

Handles ``http:``/``https:`` sources. A URL either points at a JSON template
descriptor (recognised by its ``.json`` suffix or a JSON content type) or
directly at an archive.
"""
from __future__ import annotations

import logging
import posixpath
import re
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from ..models import RemoteTemplateInfo, TemplateDescriptor
from .base import ProviderOptions, auth_headers

__all__ = ["http", "filename_from_content_disposition"]

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = (".json",)
ARCHIVE_SUFFIXES = (".tar.gz", ".tar.zst", ".tgz", ".tar")

_DISPOSITION_FILENAME = re.compile(
    r"""filename\*?\s*=\s*(?:UTF-8'[^']*')?["']?([^"';]+)["']?""",
    re.IGNORECASE,
)


def filename_from_content_disposition(value: Optional[str]) -> Optional[str]:
    """
    Extract the filename from a Content-Disposition header.

    Examples:
        >>> filename_from_content_disposition('attachment; filename=unjs-template-1a2b3c.tar.gz')
        'unjs-template-1a2b3c.tar.gz'
    """
    if not value:
        return None
    match = _DISPOSITION_FILENAME.search(value)
    if not match:
        return None
    return posixpath.basename(unquote(match.group(1).strip())) or None


def _strip_archive_suffix(name: str) -> str:
    for suffix in ARCHIVE_SUFFIXES:
        if name.lower().endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def _is_json(response: Optional[httpx.Response]) -> bool:
    if response is None or response.status_code >= 400:
        return False
    content_type = response.headers.get("content-type", "")
    return "json" in content_type.split(";", 1)[0].lower()


def http(source: str, options: ProviderOptions) -> TemplateDescriptor:
    """
    Resolve a literal URL.

    The HEAD request used for sniffing is best-effort and skipped when
    ``offline`` is True; a failed HEAD means "treat as an archive".

    Raises:
        ValueError: If the URL is not http(s)
        pydantic.ValidationError: If a JSON descriptor lacks name or tar/tarURL
        DownloadFailedError: If fetching a JSON descriptor fails
    """
    parsed = urlparse(source)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Not an http(s) URL: {source}")

    headers = auth_headers(options)
    head = None if options.offline is True else options.http.try_head(source, headers=headers)

    if parsed.path.lower().endswith(DESCRIPTOR_SUFFIXES) or _is_json(head):
        logger.debug(f"Fetching remote template descriptor from {source}")
        payload = options.http.get_json(source, headers=headers)
        return RemoteTemplateInfo.model_validate(payload).to_descriptor()

    filename = None
    if head is not None:
        filename = filename_from_content_disposition(head.headers.get("content-disposition"))
    if not filename:
        filename = posixpath.basename(unquote(parsed.path.rstrip("/")))
    name = _strip_archive_suffix(filename) if filename else parsed.netloc

    return TemplateDescriptor(
        name=name,
        version=None,
        subdir=None,
        url=source,
        tar_url=source,
        default_dir=name,
        headers=headers,
    )
