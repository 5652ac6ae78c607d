"""Repository identifier parsing."""

from __future__ import annotations

import re
from urllib.parse import urlparse


class URLParseError(Exception):
    """Raised when a repository identifier or URL cannot be parsed."""


_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_repository_id(value: str) -> str:
    """Normalize user input to an ``owner/name`` repository identifier.

    Supported formats:
      - owner/repo
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - https://github.com/owner/repo/tree/branch/...
    """
    value = value.strip()
    if not value:
        raise URLParseError("Repository is empty.")

    if "://" in value:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https"):
            raise URLParseError(f"Unsupported scheme: {parsed.scheme}")
        host = parsed.hostname or ""
        if host not in ("github.com", "www.github.com"):
            raise URLParseError(f"Unsupported host: {host}")
        path = parsed.path
    else:
        path = value

    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) < 2:
        raise URLParseError(f"Repository must be given as owner/repo: {value}")
    if "://" not in value and len(parts) > 2:
        raise URLParseError(f"Repository must be given as owner/repo: {value}")

    owner, repo = parts[0], parts[1].removesuffix(".git")
    for segment in (owner, repo):
        if not _SEGMENT.match(segment):
            raise URLParseError(f"Invalid repository name segment: {segment!r}")
    return f"{owner}/{repo}"


def repository_name(repository_id: str) -> str:
    """Short name of a repository: the second segment of ``owner/name``."""
    parts = repository_id.split("/")
    return parts[1] if len(parts) > 1 else parts[0]
