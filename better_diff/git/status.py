"""Parsing of ``git status --porcelain=v1 -z`` output."""

from __future__ import annotations

from dataclasses import dataclass

from ..diff.types import ChangeKind, DiffMode


@dataclass(frozen=True)
class StatusEntry:
    """One porcelain record: index column ``x``, worktree column ``y``."""

    x: str
    y: str
    path: str
    orig_path: str | None = None

    @property
    def is_untracked(self) -> bool:
        return self.x == "?" and self.y == "?"

    @property
    def is_ignored(self) -> bool:
        return self.x == "!" and self.y == "!"


def parse_porcelain_z(output: str) -> list[StatusEntry]:
    entries: list[StatusEntry] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        x, y = token[0], token[1]
        path = token[3:]
        orig_path = None
        # Renames and copies carry the source path as the following token.
        if x in {"R", "C"} or y in {"R", "C"}:
            if index < len(tokens):
                orig_path = tokens[index] or None
            index += 1
        entries.append(StatusEntry(x=x, y=y, path=path, orig_path=orig_path))
    return entries


def status_code_to_change_kind(code: str) -> ChangeKind:
    if code == "A" or code == "?":
        return ChangeKind.ADDED
    if code == "D":
        return ChangeKind.DELETED
    if code in {"R", "C"}:
        return ChangeKind.RENAMED
    return ChangeKind.MODIFIED


def status_code_for_mode(entry: StatusEntry, mode: DiffMode) -> str:
    if mode is DiffMode.STAGED:
        return entry.x
    return entry.y


def is_relevant_change(entry: StatusEntry, mode: DiffMode) -> bool:
    """Return whether ``entry`` belongs to the listing for ``mode``."""
    if entry.is_ignored:
        return False
    if mode is DiffMode.STAGED:
        return not entry.is_untracked and entry.x not in {" ", "?"}
    if mode is DiffMode.UNSTAGED:
        return entry.is_untracked or entry.y != " "
    return True


def change_kind_for_mode(entry: StatusEntry, mode: DiffMode) -> ChangeKind:
    if mode is DiffMode.UNSTAGED and entry.is_untracked:
        return ChangeKind.ADDED
    return status_code_to_change_kind(status_code_for_mode(entry, mode))
