"""Tests for tree_builder module."""

from helpers import dir_entry, file_entry
from RepoScribe.tree_builder import render_structure, sort_entries


class TestSortEntries:
    def test_directories_before_files(self):
        ordered = sort_entries([file_entry("a.txt"), dir_entry("z")])
        assert [e.path for e in ordered] == ["z", "a.txt"]

    def test_paths_compared_case_insensitively(self):
        ordered = sort_entries([file_entry("B.txt"), file_entry("a.txt")])
        assert [e.path for e in ordered] == ["a.txt", "B.txt"]

    def test_punctuation_compared_by_code_point(self):
        ordered = sort_entries([file_entry("a_b"), file_entry("ab"), file_entry("a-b")])
        assert [e.path for e in ordered] == ["a-b", "a_b", "ab"]

    def test_case_only_difference_is_stable(self):
        ordered = sort_entries([file_entry("a.txt"), file_entry("A.txt")])
        assert [e.path for e in ordered] == ["A.txt", "a.txt"]


class TestRenderStructure:
    def test_empty(self):
        assert render_structure([], "owner/repo") == "Directory structure:\n└── repo/\n"

    def test_single_file(self):
        result = render_structure([file_entry("README.md")], "owner/repo")
        assert result.split("\n")[2] == "└── README.md"

    def test_nested_example(self):
        entries = [file_entry("c.txt"), file_entry("a/b.txt"), dir_entry("a")]
        assert render_structure(entries, "owner/repo") == (
            "Directory structure:\n"
            "└── repo/\n"
            "├── a/\n"
            "    ├── b.txt\n"
            "└── c.txt\n"
        )

    def test_only_last_line_gets_end_cap(self):
        entries = [
            dir_entry("src"),
            dir_entry("src/lib"),
            file_entry("src/lib/util.py"),
            file_entry("README.md"),
        ]
        lines = render_structure(entries, "owner/repo").rstrip("\n").split("\n")[2:]
        assert lines == [
            "├── src/",
            "    ├── lib/",
            "├── README.md",
            "        └── util.py",
        ]

    def test_does_not_reorder_input(self):
        entries = [file_entry("b.txt"), dir_entry("a")]
        render_structure(entries, "owner/repo")
        assert [e.path for e in entries] == ["b.txt", "a"]
