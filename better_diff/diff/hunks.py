"""Line differ: structured hunks from two line sequences.

Spans come from ``difflib.SequenceMatcher`` opcodes and are folded into hunks
carrying 1-based starts, counts, and per-line numbers on both sides.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from difflib import SequenceMatcher

from .types import WHOLE_FILE_CONTEXT, DiffLine, Hunk, LineKind

_EQUAL = "equal"
_DELETE = "delete"
_INSERT = "insert"


class DiffComputationError(Exception):
    """Raised when the matcher yields a span tag the differ cannot translate."""


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``; a single trailing newline does not add an empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def decode_lines(content: bytes) -> list[str]:
    return split_lines(content.decode("utf-8", errors="replace"))


def _opcode_spans(
    old_lines: Sequence[str],
    new_lines: Sequence[str],
) -> list[tuple[str, Sequence[str]]]:
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    spans: list[tuple[str, Sequence[str]]] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            spans.append((_EQUAL, old_lines[i1:i2]))
        elif tag == "delete":
            spans.append((_DELETE, old_lines[i1:i2]))
        elif tag == "insert":
            spans.append((_INSERT, new_lines[j1:j2]))
        elif tag == "replace":
            if i1 < i2:
                spans.append((_DELETE, old_lines[i1:i2]))
            if j1 < j2:
                spans.append((_INSERT, new_lines[j1:j2]))
        else:
            raise DiffComputationError(f"unsupported opcode tag: {tag!r}")
    return spans


class _OpenHunk:
    __slots__ = ("old_start", "new_start", "lines", "trailing_context")

    def __init__(self, old_start: int, new_start: int, leading: Iterable[DiffLine]) -> None:
        self.old_start = old_start
        self.new_start = new_start
        self.lines: list[DiffLine] = list(leading)
        self.trailing_context = 0

    def close(self, context: int) -> Hunk:
        excess = self.trailing_context - context
        if excess > 0:
            del self.lines[-excess:]
        return _make_hunk(self.old_start, self.new_start, self.lines)


def _make_hunk(old_start: int, new_start: int, lines: Sequence[DiffLine]) -> Hunk:
    old_count = sum(1 for line in lines if line.kind is not LineKind.ADDED)
    new_count = sum(1 for line in lines if line.kind is not LineKind.REMOVED)
    # Empty sides point at the line before the change, as unified diffs do.
    if old_count == 0:
        old_start = max(0, old_start - 1)
    if new_count == 0:
        new_start = max(0, new_start - 1)
    return Hunk(
        old_start=old_start,
        old_count=old_count,
        new_start=new_start,
        new_count=new_count,
        lines=tuple(lines),
    )


def _build_hunks(spans: Sequence[tuple[str, Sequence[str]]], context: int) -> list[Hunk]:
    unlimited = context >= WHOLE_FILE_CONTEXT
    leading: deque[DiffLine] = deque(maxlen=None if unlimited else context)
    hunks: list[Hunk] = []
    current: _OpenHunk | None = None
    old_no = 1
    new_no = 1

    for tag, lines in spans:
        if tag == _EQUAL:
            for text in lines:
                line = DiffLine(LineKind.CONTEXT, text, old_no, new_no)
                old_no += 1
                new_no += 1
                if current is None:
                    if context > 0:
                        leading.append(line)
                    continue
                current.lines.append(line)
                current.trailing_context += 1
                if not unlimited and current.trailing_context >= context:
                    hunks.append(current.close(context))
                    current = None
            continue

        if current is None:
            first = leading[0] if leading else None
            current = _OpenHunk(
                old_start=first.old_line_number if first else old_no,
                new_start=first.new_line_number if first else new_no,
                leading=leading,
            )
            leading.clear()
        current.trailing_context = 0
        if tag == _DELETE:
            for text in lines:
                current.lines.append(DiffLine(LineKind.REMOVED, text, old_no, 0))
                old_no += 1
        else:
            for text in lines:
                current.lines.append(DiffLine(LineKind.ADDED, text, 0, new_no))
                new_no += 1

    if current is not None:
        hunks.append(current.close(context))
    return hunks


def trim_leading_context(hunks: Iterable[Hunk]) -> list[Hunk]:
    """Drop leading context so each hunk starts at its first changed line."""
    trimmed: list[Hunk] = []
    for hunk in hunks:
        skip = 0
        for line in hunk.lines:
            if line.kind is not LineKind.CONTEXT:
                break
            skip += 1
        if skip == 0:
            trimmed.append(hunk)
            continue
        if skip == len(hunk.lines):
            continue
        trimmed.append(
            _make_hunk(
                hunk.old_start + skip,
                hunk.new_start + skip,
                hunk.lines[skip:],
            )
        )
    return trimmed


def compute_hunks(
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    context: int,
    *,
    trim_leading: bool = False,
) -> list[Hunk]:
    """Return the hunks turning ``old_lines`` into ``new_lines``.

    Each hunk carries at most ``context`` unchanged lines before and after
    its changes; ``WHOLE_FILE_CONTEXT`` (or more) yields a single hunk that
    covers both files whenever anything differs. Adjacent delete/insert spans
    are emitted removed-lines first. ``trim_leading`` additionally strips
    leading context so every hunk begins at a changed line.

    Raises ``DiffComputationError`` for matcher output it cannot translate.
    """
    context = max(0, context)
    old_lines = list(old_lines)
    new_lines = list(new_lines)
    if old_lines == new_lines:
        return []
    hunks = _build_hunks(_opcode_spans(old_lines, new_lines), context)
    if trim_leading:
        hunks = trim_leading_context(hunks)
    return hunks


def count_line_stats(hunks: Iterable[Hunk]) -> tuple[int, int]:
    """Return ``(added, removed)`` line totals across ``hunks``."""
    added = 0
    removed = 0
    for hunk in hunks:
        for line in hunk.lines:
            if line.kind is LineKind.ADDED:
                added += 1
            elif line.kind is LineKind.REMOVED:
                removed += 1
    return added, removed
