"""
Unit tests for notifications/data_access.py

Tests the Supabase queries against a mocked chainable client.
"""

import unittest
from datetime import datetime, timezone
from unittest.mock import Mock

from notifications.data_access import SupabaseNotificationStore
from tests.fixtures.drop_factory import create_submission_row
from tests.fixtures.mock_helpers import create_mock_supabase, mock_response
from tests.fixtures.user_factory import create_preferences_row


class TestGetPreferences(unittest.TestCase):
    """Tests for get_preferences() method."""

    def test_existing_row(self):
        row = create_preferences_row(user_id="u1", email_notifications=False, weekly_digest=True)
        store = SupabaseNotificationStore(create_mock_supabase(row))

        preferences = store.get_preferences("u1")

        self.assertFalse(preferences.email_notifications)
        self.assertTrue(preferences.weekly_digest)

    def test_missing_row_uses_defaults(self):
        """No row: immediate on, digest off."""
        mock_client = create_mock_supabase()
        mock_client.execute.return_value = None
        store = SupabaseNotificationStore(mock_client)

        preferences = store.get_preferences("u1")

        self.assertTrue(preferences.email_notifications)
        self.assertFalse(preferences.weekly_digest)

    def test_null_columns_use_defaults(self):
        row = {"email_notifications": None, "weekly_digest": None}
        store = SupabaseNotificationStore(create_mock_supabase(row))

        preferences = store.get_preferences("u1")

        self.assertTrue(preferences.email_notifications)
        self.assertFalse(preferences.weekly_digest)


class TestDigestQueries(unittest.TestCase):
    """Tests for the queries behind the weekly digest."""

    def test_digest_recipients_filter_opted_in(self):
        mock_client = create_mock_supabase([{"user_id": "u1"}, {"user_id": "u2"}])
        store = SupabaseNotificationStore(mock_client)

        self.assertEqual(store.get_digest_recipient_ids(), ["u1", "u2"])
        mock_client.eq.assert_called_with("weekly_digest", True)

    def test_drops_owned_through_profiles(self):
        mock_client = create_mock_supabase()
        mock_client.execute.side_effect = [
            mock_response([{"id": "p1"}, {"id": "p2"}]),
            mock_response([{"id": "d1", "label": "Photos", "profile_id": "p1", "last_email_sent_at": None}]),
        ]
        store = SupabaseNotificationStore(mock_client)

        drops = store.get_drops_owned_by("u1")

        self.assertEqual([drop.id for drop in drops], ["d1"])
        mock_client.in_.assert_called_with("profile_id", ["p1", "p2"])

    def test_no_profiles_means_no_drops(self):
        mock_client = create_mock_supabase([])
        store = SupabaseNotificationStore(mock_client)

        self.assertEqual(store.get_drops_owned_by("u1"), [])
        self.assertEqual(mock_client.execute.call_count, 1)

    def test_submissions_window_query(self):
        rows = [create_submission_row(id="s1", drop_id="d1", files=["a.pdf", "b.pdf"])]
        mock_client = create_mock_supabase(rows)
        store = SupabaseNotificationStore(mock_client)
        start = datetime(2026, 1, 17, tzinfo=timezone.utc)
        end = datetime(2026, 1, 24, tzinfo=timezone.utc)

        submissions = store.get_submissions_for(["d1"], start, end)

        self.assertEqual(submissions[0].file_count, 2)
        mock_client.gte.assert_called_with("created_at", "2026-01-17T00:00:00+00:00")
        mock_client.lt.assert_called_with("created_at", "2026-01-24T00:00:00+00:00")
        mock_client.is_.assert_called_with("deleted_at", "null")
        mock_client.order.assert_called_with("created_at", desc=True)

    def test_submissions_without_drops_skip_query(self):
        mock_client = create_mock_supabase()
        store = SupabaseNotificationStore(mock_client)

        self.assertEqual(store.get_submissions_for([], datetime(2026, 1, 17), datetime(2026, 1, 24)), [])
        mock_client.execute.assert_not_called()


class TestGetSubmission(unittest.TestCase):
    """Tests for get_submission() method."""

    def test_joined_row(self):
        row = create_submission_row(id="s1", drop_id="d1")
        row["drops"] = {
            "id": "d1",
            "label": "Photos",
            "profile_id": "p1",
            "last_email_sent_at": "2026-01-24T11:58:00+00:00",
            "profiles": {"id": "p1", "user_id": "u1"},
        }
        store = SupabaseNotificationStore(create_mock_supabase(row))

        record = store.get_submission("s1")

        self.assertEqual(record.submission.id, "s1")
        self.assertEqual(record.drop.label, "Photos")
        self.assertEqual(record.owner_user_id, "u1")
        self.assertEqual(
            record.drop.last_email_sent_at, datetime(2026, 1, 24, 11, 58, tzinfo=timezone.utc)
        )

    def test_missing_submission(self):
        mock_client = create_mock_supabase()
        mock_client.execute.return_value = mock_response(None)
        store = SupabaseNotificationStore(mock_client)

        self.assertIsNone(store.get_submission("missing"))


class TestWrites(unittest.TestCase):
    """Tests for the rate-limit marker and unsubscribe writes."""

    def test_marker_update_is_forward_only(self):
        mock_client = create_mock_supabase()
        store = SupabaseNotificationStore(mock_client)

        store.set_last_email_sent_at("d1", datetime(2026, 1, 24, 12, tzinfo=timezone.utc))

        mock_client.update.assert_called_once_with({"last_email_sent_at": "2026-01-24T12:00:00+00:00"})
        mock_client.eq.assert_called_with("id", "d1")
        condition = mock_client.or_.call_args[0][0]
        self.assertIn("last_email_sent_at.is.null", condition)
        self.assertIn("last_email_sent_at.lt.2026-01-24T12:00:00+00:00", condition)

    def test_disable_channel(self):
        cases = [("immediate", "email_notifications"), ("digest", "weekly_digest")]
        for channel, column in cases:
            with self.subTest(channel=channel):
                mock_client = create_mock_supabase()
                store = SupabaseNotificationStore(mock_client)

                store.disable_channel("u1", channel)

                mock_client.upsert.assert_called_once_with(
                    {"user_id": "u1", column: False}, on_conflict="user_id"
                )


class TestResolveDeliveryAddress(unittest.TestCase):
    def test_returns_auth_email(self):
        mock_client = Mock()
        mock_client.auth.admin.get_user_by_id.return_value = Mock(user=Mock(email="owner@example.com"))
        store = SupabaseNotificationStore(mock_client)

        self.assertEqual(store.resolve_delivery_address("u1"), "owner@example.com")

    def test_missing_user(self):
        mock_client = Mock()
        mock_client.auth.admin.get_user_by_id.return_value = Mock(user=None)
        store = SupabaseNotificationStore(mock_client)

        self.assertIsNone(store.resolve_delivery_address("u1"))
