"""
Remote templates runtime layer.

This module implements download_template() and verify_template(): provider
resolution, the cached archive download with its offline policy, destination
directory policy and extraction.
"""
from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Literal, Mapping, Optional, Tuple, Union

from .errors import DownloadFailedError, DirectoryExistsError, TarballNotFoundError
from .extract import extract_archive
from .http_client import TemplateHTTP
from .models import DownloadResult, TemplateDescriptor
from .providers.base import OfflineMode, ProviderOptions, TemplateResolver
from .providers.registry import ProviderSelection, resolve_template, select_provider
from .settings import Settings, create_settings_from_env
from .storage.cache import cache_path_for, fetch_cached

__all__ = ["download_template", "verify_template", "ForceMode"]

logger = logging.getLogger(__name__)

# False: refuse a non-empty destination, True: write into it, "clean": wipe it first
ForceMode = Union[bool, Literal["clean"]]


@contextmanager
def _http_client(settings: Settings, http: Optional[TemplateHTTP]) -> Iterator[TemplateHTTP]:
    """Use the injected client, or own one for the duration of the call."""
    if http is not None:
        yield http
        return
    with TemplateHTTP(settings) as owned:
        yield owned


def _resolve(
    input: str,
    *,
    provider: Optional[str],
    providers: Optional[Mapping[str, TemplateResolver]],
    options: ProviderOptions,
) -> Tuple[ProviderSelection, TemplateDescriptor]:
    selection = select_provider(input, provider, providers)
    descriptor = resolve_template(selection, options)
    return selection, descriptor


def _should_fetch(archive_path: Path, offline: OfflineMode) -> bool:
    if offline == "prefer":
        return not archive_path.exists()
    return not offline


def _is_empty_dir(path: Path) -> bool:
    return not any(path.iterdir())


def download_template(
    input: str,
    *,
    provider: Optional[str] = None,
    providers: Optional[Mapping[str, TemplateResolver]] = None,
    dir: Optional[Union[str, Path]] = None,
    cwd: Optional[Union[str, Path]] = None,
    force: ForceMode = False,
    offline: OfflineMode = False,
    auth: Optional[str] = None,
    settings: Optional[Settings] = None,
    http: Optional[TemplateHTTP] = None,
) -> DownloadResult:
    """
    Download a template and extract it into a directory.

    This function:
    - Selects the provider and resolves the identifier to a descriptor
    - Fetches the archive into the cache, honoring the offline mode
    - Applies the destination policy (refuse / force / clean)
    - Extracts the archive, optionally re-rooted at the descriptor's subdir

    Args:
        input: Identifier, e.g. "owner/repo", "gitlab:owner/repo/sub#v1", a URL
        provider: Provider for identifiers without a prefix (default github)
        providers: Extra or overriding resolvers by name
        dir: Destination directory (default: descriptor.default_dir)
        cwd: Base directory for ``dir`` (default: current directory)
        force: False, True, or "clean"
        offline: False (always fetch), True (cache only), "prefer" (cache first)
        auth: Bearer token (default: settings.auth)
        settings: Optional settings (defaults to loading from environment)
        http: Optional HTTP client (created from settings when None)

    Returns:
        DownloadResult with the sanitized descriptor, source and destination

    Raises:
        UnsupportedProviderError: If the provider name is unknown
        TemplateResolutionError: If the provider cannot resolve the identifier
        DownloadFailedError: If the download fails and nothing is cached
        TarballNotFoundError: If offline mode leaves no cached archive
        DirectoryExistsError: If the destination is not empty and force is False,
            or is an existing non-directory and force is not "clean"
        SubdirNotFoundError: If the subdirectory does not exist in the archive
    """
    if settings is None:
        settings = create_settings_from_env()

    with _http_client(settings, http) as client:
        options = ProviderOptions(http=client, auth=auth or settings.auth, offline=offline)
        selection, descriptor = _resolve(input, provider=provider, providers=providers, options=options)
        template = descriptor.sanitized()

        archive_path = cache_path_for(settings.cache_dir, selection.provider_name, template)

        if _should_fetch(archive_path, offline):
            try:
                fetch_cached(template.tar_url, archive_path, http=client, headers=template.headers)
            except DownloadFailedError as e:
                if not archive_path.exists():
                    raise
                # offline degradation: a cached copy beats a failed download
                logger.warning(f"Download error, using cached version of {template.tar_url}: {e}")

    if not archive_path.exists():
        raise TarballNotFoundError(
            f"Tarball not found: {archive_path} (offline: {offline})",
            path=str(archive_path),
            offline=offline,
        )

    base = Path(cwd or ".").resolve()
    extract_path = (base / (dir or template.default_dir)).resolve()

    if force == "clean":
        if extract_path.is_symlink() or extract_path.is_file():
            extract_path.unlink()
        else:
            shutil.rmtree(extract_path, ignore_errors=True)
    elif extract_path.exists() and not extract_path.is_dir():
        raise DirectoryExistsError(
            f"Destination {extract_path} exists and is not a directory.", path=str(extract_path)
        )
    elif not force and extract_path.exists() and not _is_empty_dir(extract_path):
        raise DirectoryExistsError(f"Destination {extract_path} already exists.", path=str(extract_path))

    extract_archive(archive_path, extract_path, template.subdir)

    logger.info(f"Downloaded {selection.source} ({selection.provider_name}) to {extract_path}")
    return DownloadResult(
        info=template,
        source=selection.source,
        dir=extract_path,
        provider=selection.provider_name,
        archive_path=archive_path,
    )


def verify_template(
    input: str,
    *,
    provider: Optional[str] = None,
    providers: Optional[Mapping[str, TemplateResolver]] = None,
    auth: Optional[str] = None,
    settings: Optional[Settings] = None,
    http: Optional[TemplateHTTP] = None,
) -> bool:
    """
    Check that a template exists without downloading it.

    Resolves exactly like download_template() (always online) and sends a HEAD
    request to the descriptor's canonical URL. Never touches the cache or the
    filesystem.

    Returns:
        True if the canonical URL answered 2xx, or if the descriptor has no
        canonical URL; False otherwise

    Raises:
        UnsupportedProviderError: If the provider name is unknown
        TemplateResolutionError: If the provider cannot resolve the identifier
        TemplateNetworkError: If the HEAD request cannot be sent
    """
    if settings is None:
        settings = create_settings_from_env()

    with _http_client(settings, http) as client:
        options = ProviderOptions(http=client, auth=auth or settings.auth)
        _, descriptor = _resolve(input, provider=provider, providers=providers, options=options)

        if not descriptor.url:
            # the provider could parse the identifier; nothing else to check
            return True

        response = client.head(descriptor.url, headers=descriptor.headers)
        logger.debug(f"Verify {descriptor.url}: {response.status_code}")
        return 200 <= response.status_code < 300
