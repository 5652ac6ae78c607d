"""Abstract base class for repository providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from RepoScribe.cancellation import CancellationToken
from RepoScribe.models import Entry

logger = logging.getLogger(__name__)


class ListingError(Exception):
    """Raised when a directory listing request fails."""

    def __init__(self, status: int, path: str = "", message: str | None = None):
        self.status = status
        self.path = path
        super().__init__(
            message or f"Could not list '{path or '/'}' (HTTP {status})."
        )


class FileFetchError(Exception):
    """Raised when a file content request answers with a non-success status."""

    def __init__(self, status: int, path: str = ""):
        self.status = status
        self.path = path
        super().__init__(f"Could not fetch '{path}' (HTTP {status}).")


class RepoProvider(ABC):
    """Base class for Git hosting service providers."""

    @abstractmethod
    def list_directory(self, repository_id: str, path: str) -> list[Entry]:
        """List the immediate children of *path*.

        Raises ListingError on a non-success response.
        """

    @abstractmethod
    def fetch_file(self, repository_id: str, path: str) -> dict:
        """Return the raw contents payload for a single file.

        Raises FileFetchError on a non-success response.
        """

    def fetch_all_entries(
        self,
        repository_id: str,
        root_path: str = "",
        cancel_token: CancellationToken | None = None,
    ) -> list[Entry]:
        """Walk the repository depth-first, parents before their children.

        A failure listing *root_path* propagates. Failures below it only
        drop the affected subtree.
        """
        root_path = root_path.strip("/")
        visited: set[str] = {root_path}
        entries: list[Entry] = []

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        children = self.list_directory(repository_id, root_path)
        self._collect(repository_id, children, entries, visited, cancel_token)

        logger.info(
            "Listed %d entries in %s/%s", len(entries), repository_id, root_path
        )
        return entries

    def _collect(
        self,
        repository_id: str,
        children: list[Entry],
        entries: list[Entry],
        visited: set[str],
        cancel_token: CancellationToken | None,
    ) -> None:
        for entry in children:
            entries.append(entry)
            if not entry.is_dir:
                continue

            if entry.path in visited:
                logger.warning("Skipping already visited directory: %s", entry.path)
                continue
            visited.add(entry.path)

            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            try:
                grandchildren = self.list_directory(repository_id, entry.path)
            except ListingError as exc:
                logger.warning(
                    "Could not fetch contents of directory %s: %s", entry.path, exc
                )
                continue
            self._collect(repository_id, grandchildren, entries, visited, cancel_token)
