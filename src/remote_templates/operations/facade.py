"""
Operations Facade - Application service layer.

Provides a clean interface between CLI and runtime APIs, centralizing
command orchestration, configuration, and policy decisions while keeping
CLI commands thin and testable.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from ..http_client import TemplateHTTP
from ..models import DownloadResult
from ..providers.base import OfflineMode, TemplateResolver
from ..providers.registry import select_provider
from ..runtime import ForceMode, download_template as _download, verify_template as _verify
from ..settings import Settings
from ..uri import ParsedURI, parse_git_uri


@dataclass(frozen=True)
class OpsConfig:
    """
    Configuration for Operations facade.

    Centralizes policy decisions like offline mode and output verbosity
    to avoid scattered configuration.
    """
    offline: OfflineMode = False  # False, True or "prefer"
    verbose: bool = False         # Show detailed output


class Operations:
    """
    Application service facade for CLI operations.

    One method per CLI verb. Settings, HTTP client and extra providers are
    injected so tests can run against fakes; exceptions bubble up for central
    mapping in run_and_exit().
    """

    def __init__(self, config: OpsConfig, settings: Optional[Settings] = None,
                 http: Optional[TemplateHTTP] = None,
                 providers: Optional[Mapping[str, TemplateResolver]] = None):
        """
        Initialize Operations facade.

        Args:
            config: Configuration settings
            settings: Optional settings (if None, loaded from environment)
            http: Optional HTTP client (if None, one is created per call)
            providers: Extra or overriding resolvers
        """
        self.cfg = config
        if settings is None:
            from ..settings import create_settings_from_env
            settings = create_settings_from_env()
        self.settings = settings
        self.http = http
        self.providers = providers

    def download(self, source: str, dir: Optional[Union[str, Path]] = None, *,
                 provider: Optional[str] = None,
                 force: ForceMode = False,
                 cwd: Optional[Union[str, Path]] = None,
                 auth: Optional[str] = None) -> DownloadResult:
        """
        Download a template into a directory.

        Args:
            source: Template identifier
            dir: Destination directory (default: template name)
            provider: Provider for identifiers without a prefix
            force: False, True, or "clean"
            cwd: Base directory for ``dir``
            auth: Bearer token (overrides settings)

        Returns:
            DownloadResult
        """
        return _download(
            source,
            provider=provider,
            providers=self.providers,
            dir=dir,
            cwd=cwd,
            force=force,
            offline=self.cfg.offline,
            auth=auth,
            settings=self.settings,
            http=self.http,
        )

    def verify(self, source: str, *, provider: Optional[str] = None,
               auth: Optional[str] = None) -> bool:
        """
        Check that a template exists without downloading it.

        Returns:
            True if the template's canonical URL is reachable
        """
        return _verify(
            source,
            provider=provider,
            providers=self.providers,
            auth=auth,
            settings=self.settings,
            http=self.http,
        )

    def parse(self, source: str) -> ParsedURI:
        """
        Parse an identifier without resolving it.

        The provider prefix is removed first, as the resolvers see it.
        """
        return parse_git_uri(select_provider(source, providers=self.providers).source)
