"""
Unit tests for notifications/email_templates.py
"""

import tempfile
import unittest
from pathlib import Path

from notifications.email_templates import (
    NEW_SUBMISSION,
    WEEKLY_DIGEST,
    load_email_template,
)


class TestLoadEmailTemplate(unittest.TestCase):
    """Tests for load_email_template() function."""

    def test_bundled_templates_exist(self):
        for name in (NEW_SUBMISSION, WEEKLY_DIGEST):
            for kind in ("html", "text"):
                with self.subTest(name=name, kind=kind):
                    self.assertIn("{{", load_email_template(name, kind))

    def test_html_and_text_differ(self):
        html = load_email_template(NEW_SUBMISSION, "html")
        text = load_email_template(NEW_SUBMISSION, "text")

        self.assertIn("<", html)
        self.assertNotEqual(html, text)

    def test_reads_from_custom_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "new_submission.txt").write_text("Custom {{drop_label}}", encoding="utf-8")

            result = load_email_template(NEW_SUBMISSION, "text", template_dir=Path(tmp))

        self.assertEqual(result, "Custom {{drop_label}}")

    def test_missing_file_uses_fallback(self):
        """An unreadable template never stops the email."""
        with tempfile.TemporaryDirectory() as tmp:
            result = load_email_template(WEEKLY_DIGEST, "html", template_dir=Path(tmp))

        self.assertIn("Your Weekly Digest", result)
        self.assertIn("{{total_submissions}}", result)

    def test_unknown_template_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(KeyError):
                load_email_template("password_reset", "html", template_dir=Path(tmp))
