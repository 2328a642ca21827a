"""
Provider interfaces for remote templates.

A provider is any callable that turns a source string into a
TemplateDescriptor. Built-in and caller-supplied providers share this shape,
which lets callers override a built-in by registering the same name.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Protocol, Union

from ..http_client import TemplateHTTP
from ..models import TemplateDescriptor

__all__ = ["OfflineMode", "ProviderOptions", "TemplateResolver", "auth_headers"]

# False: always fetch, True: cache only, "prefer": cache when present
OfflineMode = Union[bool, Literal["prefer"]]


@dataclass(frozen=True)
class ProviderOptions:
    """
    Options handed to every resolver call.

    Attributes:
        http: Client for metadata requests (default-branch lookup, sniffing)
        auth: Bearer token forwarded in provider request headers
        offline: Offline mode; ``True`` forbids metadata requests
    """
    http: TemplateHTTP
    auth: Optional[str] = None
    offline: OfflineMode = False


class TemplateResolver(Protocol):
    """Protocol for provider resolvers."""

    def __call__(
        self,
        source: str,
        options: ProviderOptions,
    ) -> Union[TemplateDescriptor, Mapping[str, Any], None]:
        """
        Resolve a source string into a template descriptor.

        Args:
            source: Identifier with the provider prefix removed (URLs keep
                their http/https scheme)
            options: Auth, offline mode and HTTP client

        Returns:
            TemplateDescriptor, or a mapping with at least ``name`` and
            ``tar``/``tarURL``; None when the source cannot be resolved

        Raises:
            Exception: Any failure; the registry wraps it in ProviderFailedError
        """
        ...


def auth_headers(options: ProviderOptions) -> Dict[str, str]:
    """Authorization header for the configured token, if any."""
    if options.auth:
        return {"Authorization": f"Bearer {options.auth}"}
    return {}
