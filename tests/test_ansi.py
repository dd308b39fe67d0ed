"""Tests for ANSI-aware width measurement and clipping."""

from __future__ import annotations

import unittest

from better_diff.ansi import clip_ansi_line, display_width, fit_ansi_line, strip_ansi


class AnsiTests(unittest.TestCase):
    def test_escapes_take_no_columns(self) -> None:
        styled = "\x1b[31mred\x1b[0m plain"
        self.assertEqual(strip_ansi(styled), "red plain")
        self.assertEqual(display_width(styled), 9)

    def test_wide_and_combining_characters(self) -> None:
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(display_width("é"), 1)

    def test_tabs_expand_to_stops(self) -> None:
        self.assertEqual(display_width("ab\tc"), 9)
        self.assertEqual(clip_ansi_line("a\tb", 10), "a" + " " * 7 + "b")
        self.assertEqual(clip_ansi_line("a\tb", 4), "a")

    def test_clip_keeps_escapes_and_never_splits_wide_chars(self) -> None:
        self.assertEqual(clip_ansi_line("\x1b[1mhello\x1b[0m", 3), "\x1b[1mhel")
        self.assertEqual(clip_ansi_line("a日本", 2), "a")
        self.assertEqual(clip_ansi_line("abc", 0), "")

    def test_fit_pads_to_exact_width(self) -> None:
        fitted = fit_ansi_line("\x1b[32mok\x1b[0m", 5)
        self.assertEqual(display_width(fitted), 5)
        self.assertTrue(fitted.endswith("   "))
        self.assertEqual(fit_ansi_line("toolong", 4), "tool")


if __name__ == "__main__":
    unittest.main()
