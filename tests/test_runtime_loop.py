"""Tests for the event pump and the main loop driven by a pipe as stdin."""

from __future__ import annotations

import os
import queue
import unittest
from unittest import mock

from better_diff import input as input_mod
from better_diff.diff.types import FileDiff
from better_diff.runtime import loop as loop_mod
from better_diff.runtime.events import ClearError, Error, FilesLoaded, KeyPressed, Quit
from better_diff.runtime.loop import EventPump, RuntimeLoopTiming, run_main_loop
from better_diff.runtime.state import SessionState
from better_diff.tree_model import build_file_tree


class _RecordingRunner:
    def __init__(self) -> None:
        self.submitted: list[object] = []

    def submit(self, command) -> bool:
        if command is None:
            return False
        self.submitted.append(command)
        return isinstance(command, Quit)


class _FakeScreen:
    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.dimensions = (width, height)
        self.frames: list[list[str]] = []

    def size(self) -> tuple[int, int]:
        return self.dimensions

    def draw(self, lines: list[str]) -> None:
        self.frames.append(lines)


class EventPumpTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = _RecordingRunner()
        self.pump = EventPump(SessionState(), self.runner, RuntimeLoopTiming(error_display_seconds=5.0))

    def test_apply_marks_dirty_and_forwards_command(self) -> None:
        self.pump.dirty = False
        self.pump.apply(KeyPressed("o"))

        self.assertTrue(self.pump.dirty)
        self.assertEqual(len(self.runner.submitted), 1)
        self.assertFalse(self.pump.quit_requested)

    def test_quit_key_stops_pump(self) -> None:
        self.pump.apply(KeyPressed("q"))
        self.assertTrue(self.pump.quit_requested)

    def test_error_is_cleared_after_display_time(self) -> None:
        with mock.patch.object(loop_mod.time, "monotonic", return_value=100.0):
            self.pump.apply(Error("boom"))
        self.assertEqual(self.pump.clear_error_at, 105.0)

        self.pump.tick(104.9)
        self.assertEqual(self.pump.state.last_error, "boom")
        self.pump.tick(105.0)
        self.assertIsNone(self.pump.state.last_error)
        self.assertEqual(self.pump.clear_error_at, 0.0)

    def test_drain_applies_queued_events(self) -> None:
        events: queue.Queue = queue.Queue()
        events.put(FilesLoaded((FileDiff("a.py"),)))
        events.put(ClearError())

        self.pump.drain(events)

        self.assertTrue(events.empty())
        self.assertEqual([f.path for f in self.pump.state.files], ["a.py"])


class MainLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def _run(self, keys: bytes, screen: _FakeScreen, state: SessionState | None = None) -> EventPump:
        runner = _RecordingRunner()
        pump = EventPump(state or SessionState(), runner, RuntimeLoopTiming(key_poll_ms=10))
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, keys)
            run_main_loop(pump, queue.Queue(), screen, read_fd, lambda state: [f"{state.width}x{state.height}"])
        finally:
            os.close(read_fd)
            os.close(write_fd)
        return pump

    def test_resize_render_and_quit(self) -> None:
        screen = _FakeScreen(100, 30)
        pump = self._run(b"?q", screen)

        self.assertTrue(pump.quit_requested)
        self.assertTrue(pump.state.quitting)
        self.assertEqual(screen.frames[0], ["100x30"])
        # Help toggle redraws once more before the quit key.
        self.assertEqual(len(screen.frames), 2)

    def test_crlf_is_one_enter(self) -> None:
        state = SessionState()
        state.files = [FileDiff("dir/a.py")]
        state.file_tree = build_file_tree(state.files)

        pump = self._run(b"\r\nq", _FakeScreen(), state)

        self.assertEqual([row.path for row in pump.state.tree_rows()], ["dir"])
        self.assertTrue(pump.state.quitting)

    def test_search_typed_through_loop(self) -> None:
        pump = self._run(b"/ab\x7fc\rq", _FakeScreen())

        self.assertEqual(pump.state.search_query, "ac")
        self.assertFalse(pump.state.search_mode)
        self.assertTrue(pump.state.quitting)


if __name__ == "__main__":
    unittest.main()
