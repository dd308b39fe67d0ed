"""Tests for porcelain status parsing and per-mode classification."""

from __future__ import annotations

import unittest

from better_diff.diff.types import ChangeKind, DiffMode
from better_diff.git.status import (
    StatusEntry,
    change_kind_for_mode,
    is_relevant_change,
    parse_porcelain_z,
    status_code_to_change_kind,
)


class ParsePorcelainTests(unittest.TestCase):
    def test_parses_records_and_rename_sources(self) -> None:
        output = " M src/a.py\0A  new.txt\0R  moved.py\0old.py\0?? notes.md\0"

        entries = parse_porcelain_z(output)

        self.assertEqual(
            entries,
            [
                StatusEntry(" ", "M", "src/a.py"),
                StatusEntry("A", " ", "new.txt"),
                StatusEntry("R", " ", "moved.py", "old.py"),
                StatusEntry("?", "?", "notes.md"),
            ],
        )
        self.assertTrue(entries[3].is_untracked)

    def test_paths_with_spaces_survive(self) -> None:
        entries = parse_porcelain_z(" M dir with space/file name.txt\0")
        self.assertEqual(entries[0].path, "dir with space/file name.txt")

    def test_malformed_records_are_skipped(self) -> None:
        self.assertEqual(parse_porcelain_z("junk\0\0"), [])


class ClassificationTests(unittest.TestCase):
    def test_status_codes_map_to_change_kinds(self) -> None:
        self.assertIs(status_code_to_change_kind("A"), ChangeKind.ADDED)
        self.assertIs(status_code_to_change_kind("?"), ChangeKind.ADDED)
        self.assertIs(status_code_to_change_kind("D"), ChangeKind.DELETED)
        self.assertIs(status_code_to_change_kind("R"), ChangeKind.RENAMED)
        self.assertIs(status_code_to_change_kind("M"), ChangeKind.MODIFIED)
        self.assertIs(status_code_to_change_kind("T"), ChangeKind.MODIFIED)

    def test_unstaged_listing_uses_worktree_column(self) -> None:
        staged_only = StatusEntry("M", " ", "a")
        both = StatusEntry("M", "D", "b")
        untracked = StatusEntry("?", "?", "c")

        self.assertFalse(is_relevant_change(staged_only, DiffMode.UNSTAGED))
        self.assertTrue(is_relevant_change(both, DiffMode.UNSTAGED))
        self.assertIs(change_kind_for_mode(both, DiffMode.UNSTAGED), ChangeKind.DELETED)
        self.assertTrue(is_relevant_change(untracked, DiffMode.UNSTAGED))
        self.assertIs(change_kind_for_mode(untracked, DiffMode.UNSTAGED), ChangeKind.ADDED)

    def test_staged_listing_uses_index_column_and_skips_untracked(self) -> None:
        worktree_only = StatusEntry(" ", "M", "a")
        added = StatusEntry("A", "M", "b")
        untracked = StatusEntry("?", "?", "c")

        self.assertFalse(is_relevant_change(worktree_only, DiffMode.STAGED))
        self.assertTrue(is_relevant_change(added, DiffMode.STAGED))
        self.assertIs(change_kind_for_mode(added, DiffMode.STAGED), ChangeKind.ADDED)
        self.assertFalse(is_relevant_change(untracked, DiffMode.STAGED))

    def test_ignored_entries_are_never_relevant(self) -> None:
        ignored = StatusEntry("!", "!", "build/")
        for mode in DiffMode:
            self.assertFalse(is_relevant_change(ignored, mode))


if __name__ == "__main__":
    unittest.main()
