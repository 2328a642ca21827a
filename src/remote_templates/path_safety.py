"""
Destination-relative path checks for extracted template files.

extract_archive() strips the archive root (``owner-repo-<sha>/``) and the
subdirectory filter from every entry name before writing it. Whatever
remains must still land inside the destination directory.
"""
from __future__ import annotations

from pathlib import PurePosixPath


def safe_relpath(path: str) -> str:
    """
    Normalize a root-stripped archive entry path, refusing ones that escape.

    Refused:
    - "" or "." (the destination itself)
    - absolute paths, e.g. an entry named "/etc/profile" in a rootless archive
    - any ".." segment, even one that would resolve back inside
    - backslashes and NUL bytes

    Args:
        path: Entry path relative to the destination directory

    Returns:
        POSIX path with duplicate separators and "." segments removed

    Raises:
        ValueError: If the path is refused

    Examples:
        >>> safe_relpath("playground/app.ts")
        'playground/app.ts'
        >>> safe_relpath("src//index.ts")
        'src/index.ts'
        >>> safe_relpath("../../evil.txt")
        Traceback (most recent call last):
        ...
        ValueError: unsafe path: ../../evil.txt
    """
    rel = PurePosixPath(path)
    s = str(rel)
    if not s or s == ".":
        raise ValueError(f"unsafe path: {path}")
    if "\\" in s or "\x00" in s:
        raise ValueError(f"unsafe path: {path}")
    if rel.is_absolute() or ".." in rel.parts:
        raise ValueError(f"unsafe path: {path}")
    return s
