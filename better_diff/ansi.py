"""ANSI-aware text measurement and clipping for the fixed-width panes.

Escape sequences pass through untouched and take no columns; wide and
combining characters are measured the way terminals draw them.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Tabs become spaces so the clip lands on the cell the terminal would use.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    while i < len(text) and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        out.append(" " * width if ch == "\t" else ch)
        col += width
        i += 1
    return "".join(out)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip to ``width`` columns, then pad with spaces to exactly ``width``."""
    clipped = clip_ansi_line(text, width)
    pad = width - display_width(clipped)
    if pad <= 0:
        return clipped
    return clipped + "\033[0m" + " " * pad
