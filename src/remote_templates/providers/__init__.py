"""
Template providers.

Resolvers for the supported hosts and the registry that selects between them.
"""
from .base import OfflineMode, ProviderOptions, TemplateResolver
from .registry import BUILTIN_PROVIDERS, ProviderSelection, resolve_template, select_provider

__all__ = [
    "BUILTIN_PROVIDERS",
    "OfflineMode",
    "ProviderOptions",
    "ProviderSelection",
    "TemplateResolver",
    "resolve_template",
    "select_provider",
]
