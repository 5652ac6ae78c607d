"""Data classes for RepoScribe."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"


class ArtifactKind(Enum):
    README = "readme"
    DOCKER_FILES = "docker"


@dataclass(frozen=True)
class Entry:
    """One node of a repository tree as listed by the contents API."""

    name: str
    path: str
    kind: EntryKind
    size: int | None = None

    @property
    def depth(self) -> int:
        return self.path.count("/")

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_api(cls, item: dict) -> Entry:
        """Build an entry from one element of a contents listing.

        Anything that is not a directory (files, symlinks, submodules)
        is treated as a file.
        """
        kind = EntryKind.DIRECTORY if item.get("type") == "dir" else EntryKind.FILE
        size = item.get("size")
        return cls(
            name=item["name"],
            path=item["path"].strip("/"),
            kind=kind,
            size=size if kind is EntryKind.FILE and size is not None else None,
        )


@dataclass
class RepositoryMetadata:
    repository_name: str
    file_count: int
    estimated_tokens: int


@dataclass
class Repository:
    full_name: str
    name: str
    private: bool = False
    description: str | None = None
    language: str | None = None
    updated_at: str | None = None


@dataclass
class FetchProgress:
    total_files: int = 0
    fetched_files: int = 0
    current_file: str = ""
    errors: list[str] = field(default_factory=list)
