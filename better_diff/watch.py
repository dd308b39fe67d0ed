"""Filesystem watcher for the working tree and git metadata.

Built on watchdog observers. The working tree is watched recursively; inside
the git directory only ``HEAD``, ``index``, and ``refs/`` count as changes.
Callers block in ``wait_for_change`` and re-arm after each signal.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

WATCH_DEBOUNCE_SECONDS = 0.05
_RELEVANT_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})
_GIT_WATCH_NAMES = ("HEAD", "index")
_CLOSED = object()


class WatcherClosedError(Exception):
    """Raised by ``wait_for_change`` once the watcher has been closed."""


def _as_text(path: str | bytes) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="surrogateescape")
    return path


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: RepositoryWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _RELEVANT_EVENT_TYPES:
            return
        paths = [Path(_as_text(event.src_path))]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(Path(_as_text(dest)))
        if any(self._watcher.is_relevant_path(path, event.is_directory, event.event_type) for path in paths):
            self._watcher.notify()


class RepositoryWatcher:
    """Signals changes under ``root`` and the relevant parts of ``git_dir``.

    Directories created after startup are covered by the recursive watch.
    ``close`` is idempotent; after it, ``wait_for_change`` raises
    ``WatcherClosedError``.
    """

    def __init__(self, root: Path, git_dir: Path, observer=None) -> None:
        self.root = root.resolve()
        self.git_dir = git_dir.resolve()
        self._events: queue.Queue[object] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._observer = observer if observer is not None else Observer()
        self._handler = _ChangeHandler(self)

    def start(self) -> None:
        self._observer.schedule(self._handler, str(self.root), recursive=True)
        if not self.git_dir.is_relative_to(self.root) and self.git_dir.is_dir():
            self._observer.schedule(self._handler, str(self.git_dir), recursive=True)
        self._observer.start()
        logger.debug("watcher started", extra={"fields": {"root": str(self.root)}})

    @property
    def closed(self) -> bool:
        return self._closed

    def is_relevant_path(self, path: Path, is_directory: bool = False, event_type: str = EVENT_TYPE_MODIFIED) -> bool:
        if path == self.git_dir or path.is_relative_to(self.git_dir):
            if path == self.git_dir:
                return False
            relative = path.relative_to(self.git_dir)
            head = relative.parts[0]
            if head == "refs":
                return True
            return len(relative.parts) == 1 and head in _GIT_WATCH_NAMES
        if not path.is_relative_to(self.root):
            return False
        # Directory mtime updates duplicate the child events.
        if is_directory and event_type == EVENT_TYPE_MODIFIED:
            return False
        return True

    def notify(self) -> None:
        if not self._closed:
            self._events.put(True)

    def wait_for_change(self, timeout: float | None = None) -> bool:
        """Block until a relevant change; False on timeout.

        A burst of events collapses into one signal: after the first event the
        watcher sleeps for the debounce delay and drains what queued up.
        """
        if self._closed:
            raise WatcherClosedError("watcher closed")
        try:
            item = self._events.get(timeout=timeout)
        except queue.Empty:
            return False
        if item is _CLOSED:
            raise WatcherClosedError("watcher closed")

        time.sleep(WATCH_DEBOUNCE_SECONDS)
        while True:
            try:
                item = self._events.get_nowait()
            except queue.Empty:
                break
            if item is _CLOSED:
                raise WatcherClosedError("watcher closed")
        return True

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._events.put(_CLOSED)
        try:
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join(timeout=1.0)
        except RuntimeError as exc:
            logger.warning("close file watcher", extra={"fields": {"error": str(exc)}})


def start_watcher(root: Path, git_dir: Path) -> RepositoryWatcher | None:
    """Create and start a watcher; None when the platform refuses."""
    watcher = RepositoryWatcher(root, git_dir)
    try:
        watcher.start()
    except OSError as exc:
        logger.warning("create file watcher", extra={"fields": {"error": str(exc)}})
        watcher.close()
        return None
    return watcher
