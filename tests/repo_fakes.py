"""In-memory stand-ins for the repository adapter and the file watcher."""

from __future__ import annotations

import threading

from better_diff.diff.types import ChangedPath, ChangeKind, CommitSummary, DiffMode, FileContents
from better_diff.watch import WatcherClosedError


class FakeRepository:
    """Minimal in-memory repository keyed by mode and path."""

    def __init__(self) -> None:
        self.changes: dict[DiffMode, list[ChangedPath]] = {mode: [] for mode in DiffMode}
        self.contents: dict[tuple[DiffMode, str], FileContents] = {}
        self.failures: dict[str, Exception] = {}
        self.compare_paths: list[str] = []
        self.compare_contents: dict[str, FileContents] = {}
        self.commits: list[CommitSummary] = []
        self.base_commit: str | None = "base"
        self.branch = "feature"

    def add(self, mode: DiffMode, path: str, old: bytes, new: bytes, kind: ChangeKind = ChangeKind.MODIFIED) -> None:
        entry = ChangedPath(path, kind)
        existing = [c.path for c in self.changes[mode]]
        if path in existing:
            self.changes[mode][existing.index(path)] = entry
        else:
            self.changes[mode].append(entry)
        self.contents[(mode, path)] = FileContents(old, new, kind, old_exists=bool(old), new_exists=bool(new))

    def root_path(self) -> str:
        return "/repo"

    def current_branch_or_short_hash(self) -> str:
        return self.branch

    def list_changes(self, mode: DiffMode) -> list[ChangedPath]:
        return list(self.changes[mode])

    def read_contents(self, path: str, mode: DiffMode, change_kind: ChangeKind = ChangeKind.MODIFIED) -> FileContents:
        if path in self.failures:
            raise self.failures[path]
        return self.contents[(mode, path)]

    def default_branch_name(self) -> str:
        return "main"

    def default_branch_commit(self) -> str | None:
        return self.base_commit

    def commits_ahead_of_default(self) -> list[CommitSummary]:
        return list(self.commits)

    def branch_compare_files(self) -> list[str]:
        return list(self.compare_paths)

    def read_branch_compare_contents(self, path: str, base_commit: str | None = None) -> FileContents:
        if path in self.failures:
            raise self.failures[path]
        return self.compare_contents[path]


class FakeWatcher:
    """Watcher whose ``wait_for_change`` blocks until ``fire`` or ``close``."""

    def __init__(self) -> None:
        self._signal = threading.Event()
        self.closed = False
        self.error: Exception | None = None
        self.waits = 0

    def fire(self, error: Exception | None = None) -> None:
        self.error = error
        self._signal.set()

    def wait_for_change(self, timeout: float | None = None) -> bool:
        self.waits += 1
        self._signal.wait(timeout)
        self._signal.clear()
        if self.closed:
            raise WatcherClosedError("watcher closed")
        if self.error is not None:
            raise self.error
        return True

    def close(self) -> None:
        self.closed = True
        self._signal.set()
