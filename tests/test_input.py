"""Regression tests for raw-key decoding.

Covers ESC timing, arrow and paging sequences, control-key tokens and the
CR/LF folding applied before keys reach the reducer.
"""

import os
import time
import unittest

from better_diff import input as input_mod
from better_diff.input import normalize_enter


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def _read_all(self, data: bytes, count: int) -> list[str]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, data)
            return [input_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, b"\x1b")
            started = time.monotonic()
            key = input_mod.read_key(read_fd, timeout_ms=20)
            elapsed = time.monotonic() - started
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertEqual(key, "ESC")
        # Esc waits briefly for sequence bytes, but should not require another key press.
        self.assertLess(elapsed, 0.2)

    def test_arrow_and_paging_sequences(self) -> None:
        keys = self._read_all(b"\x1b[A\x1b[B\x1b[5~\x1b[6~\x1bOA", 5)
        self.assertEqual(keys, ["UP", "DOWN", "PGUP", "PGDN", "UP"])

    def test_control_keys(self) -> None:
        keys = self._read_all(b"\x03\t\x7f\r\n", 5)
        self.assertEqual(keys, ["CTRL_C", "TAB", "BACKSPACE", "ENTER_CR", "ENTER_LF"])

    def test_printable_and_multibyte_characters(self) -> None:
        keys = self._read_all("q/é".encode("utf-8"), 3)
        self.assertEqual(keys, ["q", "/", "é"])

    def test_modified_arrow_is_swallowed(self) -> None:
        keys = self._read_all(b"\x1b[1;5Aj", 2)
        self.assertEqual(keys, ["ESC", "j"])

    def test_escape_followed_by_key_keeps_the_key(self) -> None:
        keys = self._read_all(b"\x1bx", 2)
        self.assertEqual(keys, ["ESC", "x"])

    def test_timeout_returns_empty_token(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            self.assertEqual(input_mod.read_key(read_fd, timeout_ms=10), "")
        finally:
            os.close(read_fd)
            os.close(write_fd)


class NormalizeEnterTests(unittest.TestCase):
    def test_crlf_collapses_to_one_enter(self) -> None:
        key, skip = normalize_enter("ENTER_CR", False)
        self.assertEqual((key, skip), ("ENTER", True))
        self.assertEqual(normalize_enter("ENTER_LF", skip), (None, False))

    def test_lone_lf_is_enter(self) -> None:
        self.assertEqual(normalize_enter("ENTER_LF", False), ("ENTER", False))

    def test_other_keys_reset_skip(self) -> None:
        self.assertEqual(normalize_enter("j", True), ("j", False))


if __name__ == "__main__":
    unittest.main()
