"""
Data models for template resolution and download.

TemplateDescriptor is the immutable result of one provider call. Remote JSON
descriptors are validated with Pydantic before they are turned into one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "TemplateDescriptor",
    "RemoteTemplateInfo",
    "DownloadResult",
    "sanitize_name",
]

_UNSAFE_NAME_CHARS = re.compile(r"[^0-9A-Za-z-]")


def sanitize_name(value: Optional[str], default: str = "template") -> str:
    """
    Restrict a name to ``[A-Za-z0-9-]`` so it can be used as a path segment.

    Every other character is replaced with ``-``.

    Examples:
        >>> sanitize_name("unjs/template")
        'unjs-template'
        >>> sanitize_name("")
        'template'
    """
    return _UNSAFE_NAME_CHARS.sub("-", value or default)


@dataclass(frozen=True)
class TemplateDescriptor:
    """
    Resolved template metadata produced by a provider.

    Attributes:
        name: Template name, used as cache path segment and default directory
        tar_url: URL of the tar(+gzip) archive
        version: Resolved ref; also the cache file discriminant
        subdir: Subdirectory of the archive to materialize ("/" for all)
        url: Canonical browse URL, used by verification
        default_dir: Directory name used when the caller gives none
        headers: Request headers for archive and browse URLs
        extra: Additional fields carried by a remote descriptor payload
    """
    name: str
    tar_url: str
    version: Optional[str] = None
    subdir: Optional[str] = None
    url: Optional[str] = None
    default_dir: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    extra: Mapping[str, Any] = field(default_factory=dict)

    def sanitized(self) -> TemplateDescriptor:
        """Return a copy with name and default_dir restricted to [A-Za-z0-9-]."""
        name = sanitize_name(self.name)
        return replace(
            self,
            name=name,
            default_dir=sanitize_name(self.default_dir or name),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TemplateDescriptor:
        """Build a descriptor from a JSON-like mapping (validated)."""
        return RemoteTemplateInfo.model_validate(dict(data)).to_descriptor()


class RemoteTemplateInfo(BaseModel):
    """
    Template descriptor payload served as JSON by a remote URL.

    Requires ``name`` and one of ``tar`` / ``tarURL``. Unknown keys are kept
    and exposed as ``TemplateDescriptor.extra``.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., min_length=1, description="Template name")
    tar: Optional[str] = Field(default=None, description="Archive URL")
    tar_url: Optional[str] = Field(default=None, alias="tarURL", description="Archive URL (alternate key)")
    version: Optional[str] = Field(default=None, description="Template version")
    subdir: Optional[str] = Field(default=None, description="Subdirectory to extract")
    url: Optional[str] = Field(default=None, description="Canonical browse URL")
    default_dir: Optional[str] = Field(default=None, alias="defaultDir", description="Default directory name")
    headers: Dict[str, str] = Field(default_factory=dict, description="Request headers")

    @model_validator(mode="after")
    def _require_archive_url(self) -> RemoteTemplateInfo:
        if not (self.tar or self.tar_url):
            raise ValueError("template descriptor requires 'tar' or 'tarURL'")
        return self

    def to_descriptor(self) -> TemplateDescriptor:
        return TemplateDescriptor(
            name=self.name,
            tar_url=self.tar or self.tar_url,
            version=self.version,
            subdir=self.subdir,
            url=self.url,
            default_dir=self.default_dir,
            headers=dict(self.headers),
            extra=dict(self.model_extra or {}),
        )


@dataclass(frozen=True)
class DownloadResult:
    """
    Result of a template download.

    Wraps the sanitized descriptor with the runtime decisions: the identifier
    the provider saw (prefix stripped), the provider used, the cached archive
    and the destination actually written. Descriptor fields are readable
    directly on the result (``result.name``, ``result.version``).
    """
    info: TemplateDescriptor
    source: str
    dir: Path
    provider: str
    archive_path: Path

    def __getattr__(self, item: str) -> Any:
        # only reached for names that are not result fields
        if item.startswith("__") or item == "info":
            raise AttributeError(item)
        return getattr(self.info, item)
