"""
Remote templates: download project templates from git hosts and URLs.

Resolves identifiers such as ``owner/repo``, ``gitlab:owner/repo/sub#v1`` or a
plain archive URL, caches the archive and extracts the selected subtree.
"""
from .errors import (
    CorruptArchiveError,
    DirectoryExistsError,
    DownloadFailedError,
    ProviderFailedError,
    SubdirNotFoundError,
    TarballNotFoundError,
    TemplateError,
    TemplateNetworkError,
    TemplateResolutionError,
    UnsupportedProviderError,
)
from .models import DownloadResult, TemplateDescriptor
from .runtime import download_template, verify_template
from .uri import ParsedURI, parse_git_uri

__version__ = "0.1.0"

__all__ = [
    "download_template",
    "verify_template",
    "parse_git_uri",
    "ParsedURI",
    "TemplateDescriptor",
    "DownloadResult",
    "TemplateError",
    "UnsupportedProviderError",
    "TemplateResolutionError",
    "ProviderFailedError",
    "DownloadFailedError",
    "TemplateNetworkError",
    "TarballNotFoundError",
    "SubdirNotFoundError",
    "CorruptArchiveError",
    "DirectoryExistsError",
]
