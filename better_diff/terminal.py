"""Terminal control for the TUI session: raw mode, alternate screen, output."""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

FALLBACK_SIZE = (80, 24)


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Alternate screen, hidden cursor.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, b"\x1b[0m\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)``."""
        term = shutil.get_terminal_size(FALLBACK_SIZE)
        return term.columns, term.lines

    def draw(self, lines: list[str]) -> None:
        """Repaint the screen from the top-left, one row per line."""
        out = ["\x1b[H"]
        for idx, line in enumerate(lines):
            if idx:
                out.append("\r\n")
            out.append(line)
            out.append("\x1b[0m\x1b[K")
        out.append("\x1b[J")
        os.write(self.stdout_fd, "".join(out).encode("utf-8", errors="replace"))

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
