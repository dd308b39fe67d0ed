"""Runtime composition: open the repository, wire the session, run the loop."""

from __future__ import annotations

import logging
import queue
import sys
from pathlib import Path

from ..config import Settings, load_settings
from ..git.errors import NotARepositoryError
from ..git.repository import GitRepository
from ..log import close_logging, configure_logging
from ..render import SyntaxHighlighter, render_screen
from ..terminal import TerminalController
from ..ui_theme import resolve_theme
from ..watch import start_watcher
from .commands import CommandRunner
from .events import Event
from .loop import EventPump, RuntimeLoopTiming, run_main_loop
from .state import SessionState
from .update import init

logger = logging.getLogger(__name__)


def run_app(settings: Settings | None = None, start: Path | None = None) -> int:
    """Run the interactive session and return the process exit code."""
    active = settings or load_settings()
    try:
        repo = GitRepository.open(start or Path.cwd())
    except NotARepositoryError:
        print("Error: Not a git repository", file=sys.stderr)
        return 1

    _log, log_error = configure_logging(active.log_level, repo.root)
    if log_error:
        print(f"Warning: {log_error}", file=sys.stderr)

    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        print("Error: better_diff needs an interactive terminal", file=sys.stderr)
        close_logging()
        return 1

    watcher = start_watcher(repo.root, repo.git_dir)
    events: queue.Queue[Event] = queue.Queue()
    runner = CommandRunner(repo, events.put, watcher=watcher)
    state = SessionState(diff_context=active.diff_context, watch_enabled=watcher is not None)
    theme = resolve_theme(active.theme, no_color=active.no_color)
    highlighter = SyntaxHighlighter(active.style, enabled=not active.no_color)
    pump = EventPump(state, runner, RuntimeLoopTiming())

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    logger.info("session started", extra={"fields": {"root": repo.root_path(), "watching": watcher is not None}})
    try:
        with terminal.raw_mode():
            pump.start(init(state))
            run_main_loop(pump, events, terminal, stdin_fd, lambda s: render_screen(s, theme, highlighter))
    except Exception as exc:
        logger.exception("runtime failure")
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        runner.close()
        logger.info("session ended")
        close_logging()
    return 0
