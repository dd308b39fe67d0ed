"""Compose the repository adapter and the line differ into ``FileDiff`` lists.

Every entry point returns the files that succeeded; per-file failures are
logged and the file is skipped so one bad path never blanks the session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from ..git.errors import GitError, SizeLimitExceededError
from .hunks import DiffComputationError, compute_hunks, count_line_stats, decode_lines
from .types import (
    WHOLE_FILE_CONTEXT,
    ChangedPath,
    ChangeKind,
    CommitSummary,
    DiffMode,
    FileContents,
    FileDiff,
    ViewMode,
)

logger = logging.getLogger(__name__)


class Repository(Protocol):
    """Capabilities the assembler and the runtime need from a repository."""

    def root_path(self) -> str: ...

    def current_branch_or_short_hash(self) -> str: ...

    def list_changes(self, mode: DiffMode) -> list[ChangedPath]: ...

    def read_contents(self, path: str, mode: DiffMode, change_kind: ChangeKind = ...) -> FileContents: ...

    def default_branch_name(self) -> str: ...

    def default_branch_commit(self) -> str | None: ...

    def commits_ahead_of_default(self) -> list[CommitSummary]: ...

    def branch_compare_files(self) -> list[str]: ...

    def read_branch_compare_contents(self, path: str, base_commit: str | None = None) -> FileContents: ...


def effective_context(view_mode: ViewMode, context: int) -> int:
    if view_mode is ViewMode.WHOLE_FILE:
        return WHOLE_FILE_CONTEXT
    return max(0, context)


def build_file_diff(path: str, contents: FileContents, context: int) -> FileDiff | None:
    """Diff one path's contents; None when there is nothing to show.

    Raises ``DiffComputationError`` when the differ fails.
    """
    if not contents.old_exists and not contents.new_exists:
        return None
    hunks = compute_hunks(decode_lines(contents.old), decode_lines(contents.new), context)
    if not hunks:
        return None
    added, removed = count_line_stats(hunks)
    return FileDiff(
        path=path,
        change_kind=contents.change_kind,
        hunks=tuple(hunks),
        lines_added=added,
        lines_removed=removed,
    )


def _sorted_diffs(files: Iterable[FileDiff]) -> list[FileDiff]:
    return sorted(files, key=lambda f: (f.path, f.change_kind.value))


def changed_files(repo: Repository, mode: DiffMode) -> list[FileDiff]:
    """Return stats-less entries for the tree before hunks are loaded."""
    return _sorted_diffs(
        FileDiff(path=change.path, change_kind=change.change_kind) for change in repo.list_changes(mode)
    )


def _diff_one(repo: Repository, change: ChangedPath, mode: DiffMode, context: int) -> FileDiff | None:
    try:
        contents = repo.read_contents(change.path, mode, change.change_kind)
        return build_file_diff(change.path, contents, context)
    except SizeLimitExceededError:
        # Already reported as a warning by the adapter.
        return None
    except (GitError, DiffComputationError) as exc:
        logger.error(
            "get file diff",
            exc_info=exc,
            extra={"fields": {"file": change.path, "mode": mode.value}},
        )
        return None


def assemble_diffs(repo: Repository, mode: DiffMode, view_mode: ViewMode, context: int) -> list[FileDiff]:
    """Build every ``FileDiff`` for ``mode``, sorted by path then change kind."""
    if mode is DiffMode.BRANCH_COMPARE:
        return load_branch_compare(repo, view_mode, context)

    ctx = effective_context(view_mode, context)
    files: list[FileDiff] = []
    for change in repo.list_changes(mode):
        file_diff = _diff_one(repo, change, mode, ctx)
        if file_diff is not None:
            files.append(file_diff)
    return _sorted_diffs(files)


def assemble_file_diff(
    repo: Repository,
    path: str,
    mode: DiffMode,
    view_mode: ViewMode,
    context: int,
) -> FileDiff | None:
    """Build the diff for a single path, or None when it has no changes."""
    if mode is DiffMode.BRANCH_COMPARE:
        change = ChangedPath(path, ChangeKind.MODIFIED)
    else:
        change = next((c for c in repo.list_changes(mode) if c.path == path), None)
        if change is None:
            return None
    return _diff_one(repo, change, mode, effective_context(view_mode, context))


def load_branch_compare(repo: Repository, view_mode: ViewMode, context: int) -> list[FileDiff]:
    """Default-branch tip versus the working tree, one ``FileDiff`` per path."""
    paths = repo.branch_compare_files()
    if not paths:
        return []
    base_commit = repo.default_branch_commit()
    ctx = effective_context(view_mode, context)

    files: list[FileDiff] = []
    for path in paths:
        try:
            contents = repo.read_branch_compare_contents(path, base_commit)
            file_diff = build_file_diff(path, contents, ctx)
        except SizeLimitExceededError:
            continue
        except (GitError, DiffComputationError) as exc:
            logger.error(
                "skipping file in branch compare",
                exc_info=exc,
                extra={"fields": {"file": path}},
            )
            continue
        if file_diff is not None:
            files.append(file_diff)
    return _sorted_diffs(files)


def total_stats(files: Iterable[FileDiff]) -> tuple[int, int, int]:
    """Return ``(file_count, lines_added, lines_removed)``."""
    count = 0
    added = 0
    removed = 0
    for file_diff in files:
        count += 1
        added += file_diff.lines_added
        removed += file_diff.lines_removed
    return count, added, removed


def merge_diff_stats(files: list[FileDiff], diffs: list[FileDiff]) -> list[FileDiff]:
    """Overlay per-path kind and line counters from ``diffs`` onto ``files``."""
    if not diffs:
        return files
    if not files:
        return [
            FileDiff(path=d.path, change_kind=d.change_kind, lines_added=d.lines_added, lines_removed=d.lines_removed)
            for d in diffs
        ]
    by_path = {d.path: d for d in diffs}
    merged: list[FileDiff] = []
    for file_diff in files:
        stats = by_path.get(file_diff.path)
        if stats is None:
            merged.append(file_diff)
            continue
        merged.append(
            FileDiff(
                path=file_diff.path,
                change_kind=stats.change_kind,
                hunks=file_diff.hunks,
                lines_added=stats.lines_added,
                lines_removed=stats.lines_removed,
            )
        )
    return merged


def aggregate_by_path(diffs: list[FileDiff]) -> list[FileDiff]:
    """Collapse diffs to one stats entry per path, keeping first-seen order.

    Counters are summed; a path seen more than once becomes Modified.
    """
    by_path: dict[str, FileDiff] = {}
    for file_diff in diffs:
        existing = by_path.get(file_diff.path)
        if existing is None:
            by_path[file_diff.path] = FileDiff(
                path=file_diff.path,
                change_kind=file_diff.change_kind,
                lines_added=file_diff.lines_added,
                lines_removed=file_diff.lines_removed,
            )
            continue
        by_path[file_diff.path] = FileDiff(
            path=file_diff.path,
            change_kind=ChangeKind.MODIFIED,
            lines_added=existing.lines_added + file_diff.lines_added,
            lines_removed=existing.lines_removed + file_diff.lines_removed,
        )
    return list(by_path.values())
