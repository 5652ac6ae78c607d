"""Shared builders and an in-memory provider for the test suite."""

from __future__ import annotations

import base64
import threading
import time

from RepoScribe.models import Entry, EntryKind
from RepoScribe.providers.base import FileFetchError, ListingError, RepoProvider


def file_entry(path: str, size: int | None = 10) -> Entry:
    return Entry(name=path.rsplit("/", 1)[-1], path=path, kind=EntryKind.FILE, size=size)


def dir_entry(path: str) -> Entry:
    return Entry(name=path.rsplit("/", 1)[-1], path=path, kind=EntryKind.DIRECTORY)


def encoded(text: str) -> dict:
    return {"content": base64.b64encode(text.encode()).decode(), "encoding": "base64"}


class FakeProvider(RepoProvider):
    """In-memory provider.

    ``listings`` maps a directory path to its children or to an HTTP status.
    ``files`` maps a file path to a payload dict, an HTTP status or an
    exception instance. ``delays`` adds a per-file sleep in seconds.
    """

    def __init__(self, listings=None, files=None, delays=None):
        self.listings = listings or {}
        self.files = files or {}
        self.delays = delays or {}
        self.listed: list[str] = []
        self.fetched: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def list_directory(self, repository_id, path):
        self.listed.append(path)
        result = self.listings.get(path, [])
        if isinstance(result, int):
            raise ListingError(result, path)
        return list(result)

    def fetch_file(self, repository_id, path):
        with self._lock:
            self.fetched.append(path)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(path, 0))
            result = self.files.get(path, 404)
            if isinstance(result, int):
                raise FileFetchError(result, path)
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            with self._lock:
                self.in_flight -= 1
