"""
Unit tests for notifications/error_logger.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from notifications.error_logger import log_notification_error


class TestLogNotificationError(unittest.TestCase):
    """Tests for log_notification_error() function."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.env = patch.dict(os.environ, {"NOTIFICATION_LOG_DIR": self.tmp.name})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.tmp.cleanup()

    def test_writes_report(self):
        path = log_notification_error(
            "digest", "Rate limit exceeded", {"user_id": "u1", "window_start": "2026-01-17"}
        )

        self.assertTrue(path.startswith(self.tmp.name))
        self.assertIn("notification_error_digest_", os.path.basename(path))
        with open(path, encoding="utf-8") as f:
            content = f.read()
        self.assertIn("Error Type: digest", content)
        self.assertIn("Error Message: Rate limit exceeded", content)
        self.assertIn("user_id: u1", content)

    def test_without_context(self):
        path = log_notification_error("immediate", "boom")

        with open(path, encoding="utf-8") as f:
            self.assertNotIn("Context:", f.read())

    def test_separate_files_per_error(self):
        first = log_notification_error("digest", "one")
        second = log_notification_error("digest", "two")

        self.assertNotEqual(first, second)
        self.assertEqual(len(os.listdir(self.tmp.name)), 2)


class TestUnwritableLogDir(unittest.TestCase):
    """A log directory that can't be used must never raise."""

    def test_returns_none_when_dir_is_a_file(self):
        with tempfile.NamedTemporaryFile() as not_a_dir:
            with patch.dict(os.environ, {"NOTIFICATION_LOG_DIR": not_a_dir.name}):
                with patch("builtins.print") as mock_print:
                    path = log_notification_error("digest", "boom", {"user_id": "u1"})

        self.assertIsNone(path)
        printed = " ".join(str(call[0][0]) for call in mock_print.call_args_list)
        self.assertIn("boom", printed)
