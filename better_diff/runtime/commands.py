"""Execute reducer commands against the repository, detector and watcher.

Load and check commands share one worker thread, so adapter calls never
overlap and results come back in submission order. Watcher waits run on
their own daemon thread because they block until the next change.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from ..detector import ChangeDetector
from ..diff.assembler import Repository, assemble_diffs, assemble_file_diff, changed_files, load_branch_compare
from ..diff.hunks import DiffComputationError
from ..git.errors import GitError
from ..watch import RepositoryWatcher, WatcherClosedError
from .events import (
    Batch,
    CheckForChanges,
    Command,
    CommitsLoaded,
    DiffsLoaded,
    Error,
    Event,
    FilesLoaded,
    FilesystemChanged,
    GitInfoLoaded,
    LoadAllDiffs,
    LoadBranchCompareDiff,
    LoadCommitsAhead,
    LoadDiff,
    LoadFiles,
    LoadGitInfo,
    Quit,
    SingleDiffLoaded,
    WaitForChange,
    WatcherStopped,
)

logger = logging.getLogger(__name__)


class CommandRunner:
    """Turns commands into events delivered through ``post``."""

    def __init__(
        self,
        repo: Repository,
        post: Callable[[Event], None],
        watcher: RepositoryWatcher | None = None,
        detector: ChangeDetector | None = None,
    ) -> None:
        self.repo = repo
        self.post = post
        self.watcher = watcher
        self.detector = detector or ChangeDetector(repo)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="better-diff-load")
        self._lock = threading.Lock()
        self._waiting = False
        self._closed = False

    def run(self, command: Command) -> Event | None:
        """Execute one load or check command synchronously."""
        try:
            return self._run(command)
        except (GitError, DiffComputationError) as exc:
            logger.error("run command", exc_info=exc, extra={"fields": {"command": type(command).__name__}})
            return Error(str(exc))

    def _run(self, command: Command) -> Event | None:
        repo = self.repo
        if isinstance(command, LoadGitInfo):
            return GitInfoLoaded(
                root_path=repo.root_path(),
                branch=repo.current_branch_or_short_hash(),
                default_branch=repo.default_branch_name(),
            )
        if isinstance(command, LoadFiles):
            return FilesLoaded(tuple(changed_files(repo, command.mode)))
        if isinstance(command, LoadAllDiffs):
            return DiffsLoaded(tuple(assemble_diffs(repo, command.mode, command.view_mode, command.context)))
        if isinstance(command, LoadDiff):
            return SingleDiffLoaded(
                assemble_file_diff(repo, command.path, command.mode, command.view_mode, command.context)
            )
        if isinstance(command, LoadCommitsAhead):
            return CommitsLoaded(tuple(repo.commits_ahead_of_default()))
        if isinstance(command, LoadBranchCompareDiff):
            return DiffsLoaded(tuple(load_branch_compare(repo, command.view_mode, command.context)))
        if isinstance(command, CheckForChanges):
            return self.detector.check(command.mode, command.view_mode, command.context, command.last_fingerprint)
        raise TypeError(f"not a load command: {command!r}")

    def submit(self, command: Command | None) -> bool:
        """Schedule ``command``; True when it asks the session to quit."""
        if command is None or self._closed:
            return False
        if isinstance(command, Batch):
            quit_requested = False
            for child in command.commands:
                quit_requested = self.submit(child) or quit_requested
            return quit_requested
        if isinstance(command, Quit):
            return True
        if isinstance(command, WaitForChange):
            self._start_wait()
            return False
        self._executor.submit(self._run_and_post, command)
        return False

    def _run_and_post(self, command: Command) -> None:
        try:
            event = self.run(command)
        except Exception as exc:
            logger.exception("command failed", extra={"fields": {"command": type(command).__name__}})
            event = Error(str(exc))
        if event is not None:
            self.post(event)

    def _start_wait(self) -> None:
        if self.watcher is None:
            return
        with self._lock:
            if self._waiting:
                return
            self._waiting = True
        threading.Thread(target=self._wait_for_change, name="better-diff-watch", daemon=True).start()

    def _wait_for_change(self) -> None:
        assert self.watcher is not None
        event: Event | None = None
        try:
            if self.watcher.wait_for_change():
                event = FilesystemChanged()
        except WatcherClosedError:
            return
        except OSError as exc:
            logger.error("wait for file change", exc_info=exc)
            event = WatcherStopped(str(exc))
        with self._lock:
            self._waiting = False
        if event is not None:
            self.post(event)

    def close(self) -> None:
        """Stop the watcher and drop queued work; running work finishes."""
        if self._closed:
            return
        self._closed = True
        if self.watcher is not None:
            self.watcher.close()
        self._executor.shutdown(wait=False, cancel_futures=True)
