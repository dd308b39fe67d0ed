"""Screen composition: header, tree and diff panes, footer, help modal."""

from __future__ import annotations

from .help import KEY_BINDINGS, KeyBinding, help_body_lines, overlay_help
from .highlight import SyntaxHighlighter, sanitize_terminal_text
from .screen import render_screen

__all__ = [
    "KEY_BINDINGS",
    "KeyBinding",
    "SyntaxHighlighter",
    "help_body_lines",
    "overlay_help",
    "render_screen",
    "sanitize_terminal_text",
]
