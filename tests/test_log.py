"""Tests for structured log lines, error counters and handler selection."""

from __future__ import annotations

import io
import logging
import tempfile
import unittest
from pathlib import Path

from better_diff.log import (
    LOG_FILE_NAME,
    ROOT_LOGGER_NAME,
    KeyValueFormatter,
    LogStats,
    close_logging,
    configure_logging,
    log_stats,
    parse_level,
)


def _record(level: int, msg: str, fields: dict | None = None, exc: BaseException | None = None) -> logging.LogRecord:
    exc_info = (type(exc), exc, None) if exc is not None else None
    record = logging.LogRecord("better_diff.test", level, __file__, 1, msg, None, exc_info)
    if fields is not None:
        record.fields = fields
    return record


class KeyValueFormatterTests(unittest.TestCase):
    def test_fields_are_sorted_and_quoted(self) -> None:
        line = KeyValueFormatter().format(_record(logging.INFO, "loaded files", {"mode": "staged", "count": 3, "path": "a b"}))

        self.assertRegex(line, r"^time=\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3} ")
        self.assertTrue(line.endswith('level=INFO msg="loaded files" count=3 mode=staged path="a b"'), line)

    def test_error_comes_before_fields_and_warning_is_short(self) -> None:
        formatter = KeyValueFormatter()
        line = formatter.format(_record(logging.ERROR, "get file diff", {"file": "x.py"}, ValueError("bad blob")))
        self.assertTrue(line.endswith('level=ERROR msg="get file diff" error="bad blob" file=x.py'), line)

        warn = formatter.format(_record(logging.WARNING, "slow"))
        self.assertIn("level=WARN msg=slow", warn)

    def test_empty_values_and_quotes_are_escaped(self) -> None:
        line = KeyValueFormatter().format(_record(logging.DEBUG, 'say "hi"', {"empty": ""}))
        self.assertTrue(line.endswith('msg="say \\"hi\\"" empty=""'), line)


class LogStatsTests(unittest.TestCase):
    def test_counts_errors_and_warnings(self) -> None:
        stats = LogStats()
        stats.filter(_record(logging.WARNING, "careful"))
        stats.filter(_record(logging.ERROR, "broke", exc=KeyError("k")))
        stats.filter(_record(logging.ERROR, "broke again"))

        snapshot = stats.snapshot()
        self.assertEqual((snapshot.total_errors, snapshot.total_warnings), (2, 1))
        self.assertEqual(snapshot.by_type, {"KeyError": 1})
        self.assertEqual(snapshot.last_error, "broke again")
        self.assertTrue(stats.has_errors())

        stats.reset()
        self.assertFalse(stats.has_errors())

    def test_quiet_mode_drops_non_errors(self) -> None:
        stats = LogStats(quiet=True)
        self.assertFalse(stats.filter(_record(logging.WARNING, "hidden")))
        self.assertTrue(stats.filter(_record(logging.ERROR, "shown")))
        self.assertEqual(stats.snapshot().total_warnings, 0)

    def test_parse_level(self) -> None:
        self.assertEqual(parse_level("warn"), logging.WARNING)
        self.assertEqual(parse_level("DEBUG"), logging.DEBUG)
        self.assertEqual(parse_level("bogus"), logging.INFO)
        self.assertEqual(parse_level(None), logging.INFO)


class ConfigureLoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        close_logging()
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_writes_to_log_dir_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logger, error = configure_logging("DEBUG", log_dir=tmp)
            logging.getLogger("better_diff.runtime").info("started", extra={"fields": {"root": "/repo"}})
            close_logging()

            self.assertIsNone(error)
            content = (Path(tmp) / LOG_FILE_NAME).read_text(encoding="utf-8")
        self.assertIn("level=INFO msg=started root=/repo", content)
        self.assertFalse(logger.propagate)

    def test_falls_back_to_repo_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _logger, error = configure_logging("INFO", tmp, log_dir=Path(tmp) / "missing")
            close_logging()
            self.assertIsNone(error)
            self.assertTrue((Path(tmp) / LOG_FILE_NAME).exists())

    def test_falls_back_to_stream_when_no_file_opens(self) -> None:
        stream = io.StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing"
            logger, error = configure_logging("WARN", missing / "repo", stream=stream, log_dir=missing)

        self.assertIsNotNone(error)
        self.assertIn("failed to open log file", error or "")
        logger.info("filtered out")
        logger.error("kept")
        self.assertNotIn("filtered out", stream.getvalue())
        self.assertIn("msg=kept", stream.getvalue())

        stats = log_stats(logger)
        assert stats is not None
        self.assertEqual(stats.snapshot().total_errors, 1)

    def test_reconfiguring_replaces_handlers(self) -> None:
        stream = io.StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            configure_logging("INFO", log_dir=tmp)
            logger, _error = configure_logging("INFO", stream=stream, log_dir=Path(tmp) / "missing")
            self.assertEqual(len(logger.handlers), 1)
            close_logging()


if __name__ == "__main__":
    unittest.main()
