"""Targeted tests for text sanitization and per-line highlighting."""

from __future__ import annotations

import unittest

from better_diff.ansi import strip_ansi
from better_diff.render.highlight import DEFAULT_STYLE, SyntaxHighlighter, normalize_style, sanitize_terminal_text


class HighlightSanitizationTests(unittest.TestCase):
    def test_sanitize_terminal_text_escapes_control_bytes_but_keeps_tabs(self) -> None:
        sanitized = sanitize_terminal_text("a\tb\x07e\x1bf")

        self.assertEqual(sanitized, "a\tb\\x07e\\x1bf")
        self.assertNotIn("\x1b", sanitized)

    def test_plain_text_is_returned_unchanged(self) -> None:
        text = "def f(x):  return x"
        self.assertIs(sanitize_terminal_text(text), text)


class SyntaxHighlighterTests(unittest.TestCase):
    def test_known_language_gets_colors_but_same_text(self) -> None:
        highlighter = SyntaxHighlighter("monokai")
        rendered = highlighter.highlight("def main():  return 1", "pkg/app.py")

        self.assertIn("\x1b[", rendered)
        self.assertEqual(strip_ansi(rendered), "def main():  return 1")

    def test_unknown_extension_is_plain(self) -> None:
        highlighter = SyntaxHighlighter()
        self.assertEqual(highlighter.highlight("just words", "notes.zzz-unknown"), "just words")

    def test_disabled_highlighter_only_sanitizes_and_drops_carriage_return(self) -> None:
        highlighter = SyntaxHighlighter(enabled=False)
        self.assertEqual(highlighter.highlight("x = 1\r", "a.py"), "x = 1")
        self.assertEqual(highlighter.highlight("bell\x07", "a.py"), "bell\\x07")

    def test_unknown_style_falls_back(self) -> None:
        self.assertEqual(normalize_style("no-such-style"), DEFAULT_STYLE)
        self.assertEqual(normalize_style(None), DEFAULT_STYLE)
        self.assertEqual(normalize_style("native"), "native")


if __name__ == "__main__":
    unittest.main()
