"""
Git hosting providers: GitHub, GitLab, Bitbucket and sourcehut.

Each resolver parses the identifier, settles the ref (explicit, discovered
default branch, or "main") and fills in the host's URL templates.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

from ..errors import TemplateResolutionError
from ..models import TemplateDescriptor
from ..uri import ParsedURI, parse_git_uri
from .base import ProviderOptions, auth_headers

__all__ = ["github", "gitlab", "bitbucket", "sourcehut", "lookup_default_branch", "FALLBACK_REF"]

logger = logging.getLogger(__name__)

FALLBACK_REF = "main"


def lookup_default_branch(
    options: ProviderOptions,
    api_url: str,
    extract: Callable[[Any], Optional[str]],
) -> Optional[str]:
    """
    Ask a host API for the repository's default branch.

    Never raises: network errors, non-2xx responses, malformed JSON, missing
    keys and ``offline=True`` all yield None.

    Args:
        options: Provider options (HTTP client, auth, offline mode)
        api_url: Repository metadata endpoint
        extract: Picks the branch name out of the decoded JSON

    Returns:
        Branch name, or None when it could not be determined
    """
    # offline="prefer" still asks; only a strict offline run skips the request
    if options.offline is True:
        return None

    data = options.http.try_get_json(api_url, headers=auth_headers(options))
    if not isinstance(data, dict):
        return None

    try:
        ref = extract(data)
    except (KeyError, TypeError, AttributeError):
        ref = None

    if isinstance(ref, str) and ref:
        return ref
    logger.debug(f"No default branch reported by {api_url}")
    return None


def _parse(source: str, provider: str) -> ParsedURI:
    parsed = parse_git_uri(source)
    if not parsed.repo:
        raise TemplateResolutionError(f"Invalid {provider} template identifier: {source!r}")
    return parsed


def _descriptor(parsed: ParsedURI, ref: str, *, tar_url: str, url: str, headers: dict) -> TemplateDescriptor:
    return TemplateDescriptor(
        name=parsed.repo.replace("/", "-"),
        version=ref,
        subdir=parsed.subdir,
        url=url,
        tar_url=tar_url,
        headers=headers,
    )


# https://docs.github.com/en/rest/repos/contents#download-a-repository-archive-tar
def github(source: str, options: ProviderOptions) -> TemplateDescriptor:
    parsed = _parse(source, "github")
    ref = parsed.ref or lookup_default_branch(
        options,
        f"https://api.github.com/repos/{parsed.repo}",
        lambda data: data.get("default_branch"),
    ) or FALLBACK_REF

    return _descriptor(
        parsed, ref,
        url=f"https://github.com/{parsed.repo}/tree/{ref}{parsed.subdir}",
        tar_url=f"https://api.github.com/repos/{parsed.repo}/tarball/{ref}",
        headers={
            **auth_headers(options),
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        },
    )


def gitlab(source: str, options: ProviderOptions) -> TemplateDescriptor:
    parsed = _parse(source, "gitlab")
    ref = parsed.ref or lookup_default_branch(
        options,
        f"https://gitlab.com/api/v4/projects/{quote(parsed.repo, safe='')}",
        lambda data: data.get("default_branch"),
    ) or FALLBACK_REF

    return _descriptor(
        parsed, ref,
        url=f"https://gitlab.com/{parsed.repo}/tree/{ref}{parsed.subdir}",
        tar_url=f"https://gitlab.com/{parsed.repo}/-/archive/{ref}.tar.gz",
        headers={
            **auth_headers(options),
            # gitlab rejects archive requests from cross-site fetch modes
            "sec-fetch-mode": "same-origin",
        },
    )


def bitbucket(source: str, options: ProviderOptions) -> TemplateDescriptor:
    parsed = _parse(source, "bitbucket")
    ref = parsed.ref or lookup_default_branch(
        options,
        f"https://api.bitbucket.org/2.0/repositories/{parsed.repo}",
        lambda data: data["mainbranch"]["name"],
    ) or FALLBACK_REF

    return _descriptor(
        parsed, ref,
        url=f"https://bitbucket.com/{parsed.repo}/src/{ref}{parsed.subdir}",
        tar_url=f"https://bitbucket.org/{parsed.repo}/get/{ref}.tar.gz",
        headers=auth_headers(options),
    )


def sourcehut(source: str, options: ProviderOptions) -> TemplateDescriptor:
    parsed = _parse(source, "sourcehut")
    # sourcehut has no public API for the default branch
    ref = parsed.ref or FALLBACK_REF

    return _descriptor(
        parsed, ref,
        url=f"https://git.sr.ht/~{parsed.repo}/tree/{ref}/item{parsed.subdir}",
        tar_url=f"https://git.sr.ht/~{parsed.repo}/archive/{ref}.tar.gz",
        headers=auth_headers(options),
    )
