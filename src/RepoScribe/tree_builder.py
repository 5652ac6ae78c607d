"""Flat, indentation-based directory listing for a repository."""

from __future__ import annotations

from RepoScribe.models import Entry
from RepoScribe.url_parser import repository_name

BRANCH = "├── "
END_CAP = "└── "
INDENT = "    "


def sort_entries(entries: list[Entry]) -> list[Entry]:
    """Directories before files, then by path, case-insensitively first."""
    return sorted(
        entries,
        key=lambda entry: (not entry.is_dir, entry.path.casefold(), entry.path),
    )


def render_structure(entries: list[Entry], repository_id: str) -> str:
    """Render the repository as a flat listing.

    Example output:
        Directory structure:
        └── repo/
        ├── src/
        ├── README.md
            └── main.py

    Only the very last line of the whole listing gets the end-cap glyph;
    this is not a nested tree with per-directory last-child markers.
    """
    ordered = sort_entries(entries)
    lines = ["Directory structure:", f"{END_CAP}{repository_name(repository_id)}/"]

    for i, entry in enumerate(ordered):
        connector = END_CAP if i == len(ordered) - 1 else BRANCH
        display_name = f"{entry.name}/" if entry.is_dir else entry.name
        lines.append(f"{INDENT * entry.depth}{connector}{display_name}")

    return "\n".join(lines) + "\n"
