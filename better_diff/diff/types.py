"""Value types shared by the differ, the repository adapter, and the UI.

``FileDiff`` and ``Hunk`` instances are treated as immutable once emitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_DIFF_CONTEXT = 5
WHOLE_FILE_CONTEXT = 999_999
MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_COMMITS_AHEAD = 50


class ChangeKind(Enum):
    MODIFIED = 0
    ADDED = 1
    DELETED = 2
    RENAMED = 3


class LineKind(Enum):
    CONTEXT = 0
    ADDED = 1
    REMOVED = 2


class DiffMode(Enum):
    UNSTAGED = "unstaged"
    STAGED = "staged"
    BRANCH_COMPARE = "branch_compare"


class ViewMode(Enum):
    DIFF_ONLY = "diff_only"
    WHOLE_FILE = "whole_file"


DIFF_MODE_LABELS: dict[DiffMode, str] = {
    DiffMode.UNSTAGED: "Unstaged",
    DiffMode.STAGED: "Staged",
    DiffMode.BRANCH_COMPARE: "Branch Compare",
}

VIEW_MODE_LABELS: dict[ViewMode, str] = {
    ViewMode.DIFF_ONLY: "Diff Only",
    ViewMode.WHOLE_FILE: "Whole File",
}


def next_diff_mode(mode: DiffMode) -> DiffMode:
    """Cycle Unstaged -> Staged -> Branch Compare -> Unstaged."""
    if mode is DiffMode.UNSTAGED:
        return DiffMode.STAGED
    if mode is DiffMode.STAGED:
        return DiffMode.BRANCH_COMPARE
    return DiffMode.UNSTAGED


@dataclass(frozen=True)
class DiffLine:
    """One line of a hunk; line numbers are 0 when not applicable."""

    kind: LineKind
    content: str
    old_line_number: int = 0
    new_line_number: int = 0


@dataclass(frozen=True)
class Hunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...] = ()


@dataclass(frozen=True)
class FileDiff:
    """Per-path change entry.

    Entries built from a status listing carry no hunks; entries built by the
    assembler carry hunks and line counters derived from them.
    """

    path: str
    change_kind: ChangeKind = ChangeKind.MODIFIED
    hunks: tuple[Hunk, ...] = ()
    lines_added: int = 0
    lines_removed: int = 0


@dataclass(frozen=True)
class ChangedPath:
    path: str
    change_kind: ChangeKind


@dataclass(frozen=True)
class CommitSummary:
    hash: str
    short_hash: str
    author: str
    message: str
    date: str


@dataclass(frozen=True)
class FileContents:
    """Old/new byte streams for one path plus the resolved change kind."""

    old: bytes
    new: bytes
    change_kind: ChangeKind
    old_exists: bool = True
    new_exists: bool = True

