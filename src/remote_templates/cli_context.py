"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
HTTP client, avoiding global state and enabling proper dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .http_client import TemplateHTTP
from .settings import Settings, create_settings_from_env


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Manages application-level dependencies (settings, HTTP client) that are
    initialized once and shared across a CLI command execution.
    """
    settings: Settings
    _http: Optional[TemplateHTTP] = None

    @classmethod
    def from_env(cls) -> CLIContext:
        """
        Create CLI context from environment variables.

        Returns:
            CLIContext with settings loaded from environment
        """
        settings = create_settings_from_env()
        return cls(settings=settings)

    @property
    def http(self) -> TemplateHTTP:
        """
        Get or create the HTTP client (lazy initialization).

        Returns:
            TemplateHTTP instance reused for the rest of the command
        """
        if self._http is None:
            self._http = TemplateHTTP(self.settings)
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None
