"""
Provider registry.

Maps provider names to resolvers and turns an identifier into a
TemplateDescriptor. Caller-supplied providers are layered over the built-in
table by plain mapping lookup, so registering a built-in name overrides it.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from ..errors import ProviderFailedError, TemplateResolutionError, UnsupportedProviderError
from ..models import TemplateDescriptor
from .base import ProviderOptions, TemplateResolver
from .git_hosts import bitbucket, github, gitlab, sourcehut
from .http import http

__all__ = [
    "BUILTIN_PROVIDERS",
    "DEFAULT_PROVIDER",
    "ProviderSelection",
    "select_provider",
    "resolve_template",
]

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "github"

# URL schemes that are kept in the source handed to the resolver
_URL_SCHEMES = ("http", "https")

_PROVIDER_PREFIX = re.compile(r"^([\w.-]+):")

BUILTIN_PROVIDERS: Mapping[str, TemplateResolver] = {
    "http": http,
    "https": http,
    "github": github,
    "gh": github,
    "gitlab": gitlab,
    "bitbucket": bitbucket,
    "sourcehut": sourcehut,
}


@dataclass(frozen=True)
class ProviderSelection:
    """
    Outcome of provider selection.

    Attributes:
        source: Identifier handed to the resolver (provider prefix removed,
            URL schemes kept)
        provider_name: Selected provider name
        resolver: Resolver callable, or None when the name is unknown
    """
    source: str
    provider_name: str
    resolver: Optional[TemplateResolver]


def select_provider(
    input: str,
    provider: Optional[str] = None,
    providers: Optional[Mapping[str, TemplateResolver]] = None,
) -> ProviderSelection:
    """
    Select the provider for an identifier.

    A leading ``name:`` picks the provider by name. ``http:``/``https:`` are
    URL schemes and stay part of the source; any other prefix is stripped.
    Without a prefix the ``provider`` argument applies, else "github".

    Args:
        input: Full identifier, e.g. "gh:owner/repo/sub#ref"
        provider: Provider used when the identifier has no prefix
        providers: Caller resolvers, consulted before the built-ins

    Returns:
        ProviderSelection (resolver is None for unknown names)

    Examples:
        >>> select_provider("gitlab:org/repo").source
        'org/repo'
        >>> select_provider("https://example.com/t.tar.gz").provider_name
        'https'
    """
    provider_name = provider or DEFAULT_PROVIDER
    source = input

    match = _PROVIDER_PREFIX.match(input)
    if match:
        provider_name = match.group(1)
        if provider_name not in _URL_SCHEMES:
            source = input[match.end():]

    if providers and provider_name in providers:
        resolver = providers[provider_name]
    else:
        resolver = BUILTIN_PROVIDERS.get(provider_name)

    return ProviderSelection(source=source, provider_name=provider_name, resolver=resolver)


def resolve_template(selection: ProviderSelection, options: ProviderOptions) -> TemplateDescriptor:
    """
    Run the selected resolver and normalize its result.

    Args:
        selection: Result of select_provider()
        options: Options forwarded to the resolver

    Returns:
        TemplateDescriptor as built by the provider (not yet sanitized)

    Raises:
        UnsupportedProviderError: If no resolver is registered for the name
        ProviderFailedError: If the resolver raised (original error chained)
        TemplateResolutionError: If the resolver returned nothing
    """
    if selection.resolver is None:
        raise UnsupportedProviderError(f"Unsupported provider: {selection.provider_name}")

    logger.debug(f"Resolving {selection.source!r} with provider {selection.provider_name}")
    try:
        result = selection.resolver(selection.source, options)
        if result and not isinstance(result, TemplateDescriptor):
            result = TemplateDescriptor.from_mapping(result)
    except Exception as e:
        raise ProviderFailedError(
            f"The {selection.provider_name} provider failed with errors: {e}",
            provider=selection.provider_name,
        ) from e

    if not result:
        raise TemplateResolutionError(
            f"The {selection.provider_name} provider could not resolve {selection.source!r}"
        )
    return result
