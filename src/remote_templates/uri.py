"""
Template identifier parsing.

Single source of truth for the ``<repo>[<subdir>][#<ref>]`` identifier syntax
shared by every git-host provider.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

__all__ = ["ParsedURI", "parse_git_uri"]

# repo is owner/name, subdir runs up to '#', ref is the remainder
_INPUT_PATTERN = re.compile(
    r"^(?P<repo>[\w.-]+/[\w.-]+)(?P<subdir>[^#]+)?(?:#(?P<ref>.*))?$",
    re.DOTALL | re.ASCII,
)


@dataclass(frozen=True)
class ParsedURI:
    """
    Parsed components of a template identifier.

    Attributes:
        repo: ``owner/name``; empty string when the identifier did not match
        subdir: Path inside the repository, always non-empty ("/" for root)
        ref: Branch, tag or commit; None means "use the provider default"
    """
    repo: str
    subdir: str = "/"
    ref: Optional[str] = None

    def to_source(self) -> str:
        """Canonical identifier form; parses back to an equal ParsedURI."""
        source = self.repo
        if self.subdir != "/":
            source += self.subdir
        if self.ref:
            source += f"#{self.ref}"
        return source


def parse_git_uri(input: str) -> ParsedURI:
    """
    Parse a template identifier.

    Accepts identifiers in the form: owner/name[/sub/dir][#ref]

    No network access. An identifier without an ``owner/name`` prefix yields
    ``repo == ""``; callers treat that as a resolution failure.

    Args:
        input: Identifier with any provider prefix already removed

    Returns:
        ParsedURI with subdir defaulting to "/" and ref defaulting to None

    Examples:
        >>> parse_git_uri("org/repo")
        ParsedURI(repo='org/repo', subdir='/', ref=None)

        >>> parse_git_uri("org/repo/foo/bar#v1.2.0")
        ParsedURI(repo='org/repo', subdir='/foo/bar', ref='v1.2.0')
    """
    match = _INPUT_PATTERN.match(input or "")
    if not match:
        return ParsedURI(repo="")

    return ParsedURI(
        repo=match.group("repo"),
        subdir=match.group("subdir") or "/",
        ref=match.group("ref") or None,
    )
