"""Per-line syntax highlighting for diff content through Pygments.

Pygments is imported on first use so startup stays fast. Unknown styles fall
back to ``monokai``; files without a lexer are shown unhighlighted.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

DEFAULT_STYLE = "monokai"
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

_PYGMENTS_READY = False
_PYGMENTS_HIGHLIGHT = None
_PYGMENTS_GET_LEXER_FOR_FILENAME = None
_PYGMENTS_FORMATTER_CLASS = None
_PYGMENTS_GET_STYLE_BY_NAME = None
_PYGMENTS_CLASS_NOT_FOUND: type[Exception] = Exception


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes so file content cannot move the cursor or ring the bell."""
    if _CONTROL_RE.search(source) is None:
        return source
    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch == "\t":
            out.append(ch)
        elif code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
        else:
            out.append(ch)
    return "".join(out)


def _ensure_pygments_loaded() -> None:
    global _PYGMENTS_READY
    global _PYGMENTS_HIGHLIGHT
    global _PYGMENTS_GET_LEXER_FOR_FILENAME
    global _PYGMENTS_FORMATTER_CLASS
    global _PYGMENTS_GET_STYLE_BY_NAME
    global _PYGMENTS_CLASS_NOT_FOUND

    if _PYGMENTS_READY:
        return

    from pygments import highlight as pygments_highlight
    from pygments.formatters import Terminal256Formatter
    from pygments.lexers import get_lexer_for_filename
    from pygments.styles import get_style_by_name
    from pygments.util import ClassNotFound

    _PYGMENTS_HIGHLIGHT = pygments_highlight
    _PYGMENTS_GET_LEXER_FOR_FILENAME = get_lexer_for_filename
    _PYGMENTS_FORMATTER_CLASS = Terminal256Formatter
    _PYGMENTS_GET_STYLE_BY_NAME = get_style_by_name
    _PYGMENTS_CLASS_NOT_FOUND = ClassNotFound
    _PYGMENTS_READY = True


def normalize_style(style: str | None) -> str:
    _ensure_pygments_loaded()
    if not style:
        return DEFAULT_STYLE
    try:
        _PYGMENTS_GET_STYLE_BY_NAME(style)
    except _PYGMENTS_CLASS_NOT_FOUND:
        return DEFAULT_STYLE
    return style


class SyntaxHighlighter:
    """Highlights single lines, caching one lexer per file name.

    With ``enabled=False`` lines are only sanitized.
    """

    def __init__(self, style: str | None = None, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lexers: dict[str, object | None] = {}
        self._formatter = None
        if enabled:
            _ensure_pygments_loaded()
            self._formatter = _PYGMENTS_FORMATTER_CLASS(style=normalize_style(style))

    def _lexer_for(self, path: str):
        name = PurePosixPath(path).name
        if name in self._lexers:
            return self._lexers[name]
        try:
            lexer = _PYGMENTS_GET_LEXER_FOR_FILENAME(name, stripnl=False, ensurenl=False)
        except _PYGMENTS_CLASS_NOT_FOUND:
            lexer = None
        self._lexers[name] = lexer
        return lexer

    def highlight(self, line: str, path: str) -> str:
        text = sanitize_terminal_text(line[:-1] if line.endswith("\r") else line)
        if not self.enabled or not text:
            return text
        lexer = self._lexer_for(path)
        if lexer is None:
            return text
        return _PYGMENTS_HIGHLIGHT(text, lexer, self._formatter).rstrip("\n")
