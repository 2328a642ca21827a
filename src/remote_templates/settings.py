"""
Settings and configuration for remote templates.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at call time.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

__all__ = ["Settings", "create_settings_from_env", "default_cache_dir"]

CACHE_DIR_NAME = "remote-templates"


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for template downloads.

    Attributes:
        cache_dir: Root of the archive cache (<cache_dir>/<provider>/<name>/...)
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Extra attempts for timed-out requests (0=no retry)
        auth: Bearer token forwarded to providers
        insecure: Skip TLS certificate verification (local mirrors only)
    """
    cache_dir: str
    http_timeout_s: float = 30.0
    http_retry: int = 0
    auth: Optional[str] = None
    insecure: bool = False

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.cache_dir:
            raise ValueError("cache_dir is required")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")


def default_cache_dir() -> str:
    """
    XDG-style cache location.

    ``$XDG_CACHE_HOME/remote-templates`` when XDG_CACHE_HOME is set,
    otherwise ``~/.cache/remote-templates``.
    """
    xdg = os.getenv("XDG_CACHE_HOME")
    if xdg:
        return str(Path(xdg).resolve() / CACHE_DIR_NAME)
    return str(Path.home() / ".cache" / CACHE_DIR_NAME)


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - REMOTE_TEMPLATES_CACHE_DIR (default: XDG cache dir, see default_cache_dir)
        - REMOTE_TEMPLATES_HTTP_TIMEOUT (default: 30.0)
        - REMOTE_TEMPLATES_HTTP_RETRY (default: 0)
        - REMOTE_TEMPLATES_AUTH (optional)
        - REMOTE_TEMPLATES_INSECURE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
        This ensures test isolation and eliminates global state.
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    return Settings(
        cache_dir=os.getenv("REMOTE_TEMPLATES_CACHE_DIR") or default_cache_dir(),
        http_timeout_s=get_float("REMOTE_TEMPLATES_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("REMOTE_TEMPLATES_HTTP_RETRY", 0),
        auth=os.getenv("REMOTE_TEMPLATES_AUTH") or None,
        insecure=str_to_bool(os.getenv("REMOTE_TEMPLATES_INSECURE", "false")),
    )
