"""Concatenate repository file contents into one annotated document."""

from __future__ import annotations

import base64
import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Generator

import requests

from RepoScribe.cancellation import CancellationToken
from RepoScribe.models import Entry, FetchProgress
from RepoScribe.providers.base import FileFetchError, RepoProvider

logger = logging.getLogger(__name__)

DELIMITER = "=" * 48

BINARY_PLACEHOLDER = "[Binary file or encoding error]"
EMPTY_PLACEHOLDER = "[Empty file or could not decode content]"
FETCH_ERROR_PLACEHOLDER = "[Error: Could not fetch file content]"


def fetch_error_placeholder(status: int) -> str:
    return f"[Error: Could not fetch file content - {status}]"


def decode_content(raw: str | None) -> str | None:
    """Decode a base64 contents-API payload into text.

    Returns None for an absent or empty payload. Raises ValueError when the
    payload is not valid base64 or not UTF-8 text.
    """
    if not raw:
        return None
    data = base64.b64decode(raw.replace("\n", ""), validate=True)
    return data.decode("utf-8")


def render_document(repository_id: str, sections: list[tuple[str, str]]) -> str:
    """Render (path, body) pairs in the fixed FILE-delimited layout."""
    parts = [f"Repository: {repository_id}\n\n"]
    for path, body in sections:
        parts.append(f"{DELIMITER}\nFILE: {path}\n{DELIMITER}\n{body}\n\n")
    return "".join(parts)


class ContentAggregator:
    """Fetches file contents through a bounded pool of worker threads.

    Requests may complete in any order; sections are always emitted in
    the order of the entries passed in.
    """

    def __init__(self, provider: RepoProvider, max_workers: int = 4):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.provider = provider
        self.max_workers = max_workers

    def fetch_section(
        self, repository_id: str, entry: Entry
    ) -> tuple[str, str | None]:
        """Return the section body for one file and the fetch error, if any.

        Fetch and decode failures become placeholder bodies instead of
        exceptions.
        """
        try:
            payload = self.provider.fetch_file(repository_id, entry.path)
        except FileFetchError as exc:
            logger.warning("Could not fetch content for file %s: %s", entry.path, exc)
            return fetch_error_placeholder(exc.status), str(exc)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Could not fetch content for file %s: %s", entry.path, exc)
            return FETCH_ERROR_PLACEHOLDER, str(exc)

        try:
            text = decode_content(payload.get("content"))
        except ValueError:
            return BINARY_PLACEHOLDER, None
        if text is None:
            return EMPTY_PLACEHOLDER, None
        return text, None

    def iter_sections(
        self,
        repository_id: str,
        entries: list[Entry],
        bodies: dict[int, str],
        cancel_token: CancellationToken | None = None,
    ) -> Generator[FetchProgress, None, None]:
        """Fill *bodies* keyed by file index, yielding progress as files finish.

        Only entries of kind file are fetched. At most ``max_workers``
        requests are in flight at any time.
        """
        files = [entry for entry in entries if entry.is_file]
        progress = FetchProgress(total_files=len(files))
        pending: dict[Future, int] = {}
        next_index = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            try:
                while next_index < len(files) or pending:
                    while next_index < len(files) and len(pending) < self.max_workers:
                        if cancel_token is not None:
                            cancel_token.raise_if_cancelled()
                        future = pool.submit(
                            self.fetch_section, repository_id, files[next_index]
                        )
                        pending[future] = next_index
                        next_index += 1

                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        index = pending.pop(future)
                        body, error = future.result()
                        bodies[index] = body
                        if error:
                            progress.errors.append(f"{files[index].path}: {error}")
                        progress.current_file = files[index].path
                        progress.fetched_files += 1
                        yield progress
            finally:
                for future in pending:
                    future.cancel()

    def aggregate(
        self,
        repository_id: str,
        entries: list[Entry],
        cancel_token: CancellationToken | None = None,
        on_progress: Callable[[FetchProgress], None] | None = None,
    ) -> str:
        files = [entry for entry in entries if entry.is_file]
        bodies: dict[int, str] = {}
        for progress in self.iter_sections(repository_id, files, bodies, cancel_token):
            if on_progress is not None:
                on_progress(progress)
        logger.info("Aggregated %d files from %s", len(files), repository_id)
        return render_document(
            repository_id,
            [(entry.path, bodies[index]) for index, entry in enumerate(files)],
        )


def aggregate_file_contents(
    provider: RepoProvider,
    repository_id: str,
    entries: list[Entry],
    max_workers: int = 4,
    cancel_token: CancellationToken | None = None,
) -> str:
    """Fetch every file in *entries* and return the aggregated document."""
    return ContentAggregator(provider, max_workers).aggregate(
        repository_id, entries, cancel_token
    )
