"""Main interactive event loop for the terminal UI.

Polls keys and terminal size, drains results posted by background commands,
feeds everything through the reducer one event at a time, and redraws only
when something changed.
"""

from __future__ import annotations

import queue
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..input import normalize_enter, read_key
from .commands import CommandRunner
from .events import ClearError, Command, Error, Event, KeyPressed, WindowResized
from .state import SessionState
from .update import update


class ScreenSink(Protocol):
    def size(self) -> tuple[int, int]: ...

    def draw(self, lines: list[str]) -> None: ...


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_poll_ms: int = 50
    error_display_seconds: float = 5.0


class EventPump:
    """Applies events to the session and forwards the resulting commands."""

    def __init__(self, state: SessionState, runner: CommandRunner, timing: RuntimeLoopTiming) -> None:
        self.state = state
        self.runner = runner
        self.timing = timing
        self.dirty = True
        self.quit_requested = False
        self.clear_error_at = 0.0

    def start(self, command: Command) -> None:
        if self.runner.submit(command):
            self.quit_requested = True

    def apply(self, event: Event) -> None:
        self.state, command = update(self.state, event)
        self.dirty = True
        if isinstance(event, Error):
            self.clear_error_at = time.monotonic() + self.timing.error_display_seconds
        if self.runner.submit(command):
            self.quit_requested = True

    def drain(self, events: queue.Queue[Event]) -> None:
        while not self.quit_requested:
            try:
                event = events.get_nowait()
            except queue.Empty:
                return
            self.apply(event)

    def tick(self, now: float) -> None:
        if self.clear_error_at and now >= self.clear_error_at:
            self.clear_error_at = 0.0
            self.apply(ClearError())


def run_main_loop(
    pump: EventPump,
    events: queue.Queue[Event],
    screen: ScreenSink,
    stdin_fd: int,
    render: Callable[[SessionState], list[str]],
) -> None:
    """Run until a quit command is issued.

    Each iteration handles terminal resize, posted results, error expiry,
    optional rendering, and one key read with a short timeout.
    """
    skip_next_lf = False
    while not pump.quit_requested:
        width, height = screen.size()
        if (width, height) != (pump.state.width, pump.state.height):
            pump.apply(WindowResized(width, height))

        pump.drain(events)
        pump.tick(time.monotonic())
        if pump.quit_requested:
            break

        if pump.dirty:
            screen.draw(render(pump.state))
            pump.dirty = False

        try:
            raw = read_key(stdin_fd, timeout_ms=pump.timing.key_poll_ms)
        except KeyboardInterrupt:
            raw = "CTRL_C"
        if raw == "":
            continue
        key, skip_next_lf = normalize_enter(raw, skip_next_lf)
        if key is None:
            continue
        pump.apply(KeyPressed(key))
