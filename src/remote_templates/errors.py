"""
Template error classes.

Provides a clear taxonomy of the failures that can occur while resolving,
downloading and extracting a template. Every failure surfaced to callers is
one of these kinds so that they can be caught individually and mapped to
CLI exit codes in one place.
"""
from __future__ import annotations


class TemplateError(Exception):
    """
    Base class for all template errors.
    """
    pass


class UnsupportedProviderError(TemplateError):
    """
    No resolver is registered under the requested provider name.

    This corresponds to exit code 2 in the CLI.
    """
    pass


class TemplateResolutionError(TemplateError):
    """
    A provider could not turn the identifier into a template descriptor.

    Raised when:
    - The identifier does not contain an ``owner/name`` repository
    - A resolver returned nothing
    - A remote descriptor payload is missing required fields

    This corresponds to exit code 1 in the CLI.
    """
    pass


class DownloadFailedError(TemplateError):
    """
    Fetching a template archive failed.

    Raised when:
    - The server answered with a status >= 400
    - The response body was empty
    - The transport failed and no usable cached archive exists

    This corresponds to exit code 3 in the CLI.
    """
    pass


class TemplateNetworkError(DownloadFailedError):
    """
    The request never produced a response (DNS, connect, timeout, TLS).
    """
    pass


class ProviderFailedError(TemplateResolutionError, DownloadFailedError):
    """
    A resolver raised while building the descriptor.

    The original exception is available as ``__cause__``. Catchable both as a
    resolution failure and as a download failure.
    """

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class TarballNotFoundError(TemplateError):
    """
    The archive is not in the cache and the offline mode forbids fetching it.

    This corresponds to exit code 4 in the CLI.
    """

    def __init__(self, message: str, path: str | None = None, offline: object = None):
        super().__init__(message)
        self.path = path
        self.offline = offline


class SubdirNotFoundError(TemplateError):
    """
    A filtered extraction matched zero archive entries.

    This corresponds to exit code 5 in the CLI.
    """

    def __init__(self, message: str, subdir: str | None = None):
        super().__init__(message)
        self.subdir = subdir


class CorruptArchiveError(TemplateError):
    """
    The archive stream could not be decompressed or parsed.

    This corresponds to exit code 6 in the CLI.
    """
    pass


class DirectoryExistsError(TemplateError):
    """
    The destination directory is not empty and no force policy was given.

    This corresponds to exit code 12 in the CLI.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


__all__ = [
    "TemplateError",
    "UnsupportedProviderError",
    "TemplateResolutionError",
    "DownloadFailedError",
    "TemplateNetworkError",
    "ProviderFailedError",
    "TarballNotFoundError",
    "SubdirNotFoundError",
    "CorruptArchiveError",
    "DirectoryExistsError",
]
