"""
Supabase queries used by the notification engine.

The notifier and digest code only talk to a NotificationStore, so tests
(and any other backend) can substitute their own implementation.
"""

from datetime import datetime
from typing import Any, Protocol, cast

from models import Drop, Submission, SubmissionRecord, UserPreferences
from models.types import DropID, NotificationChannel, SubmissionID, UserID
from shared.db import get_supabase_client
from shared.utils import ensure_utc

CHANNEL_COLUMNS: dict[NotificationChannel, str] = {
    "immediate": "email_notifications",
    "digest": "weekly_digest",
}


class NotificationStore(Protocol):
    def get_preferences(self, user_id: UserID) -> UserPreferences: ...

    def get_digest_recipient_ids(self) -> list[UserID]: ...

    def get_drops_owned_by(self, user_id: UserID) -> list[Drop]: ...

    def get_submissions_for(
        self, drop_ids: list[DropID], window_start: datetime, window_end: datetime
    ) -> list[Submission]: ...

    def get_submission(self, submission_id: SubmissionID) -> SubmissionRecord | None: ...

    def set_last_email_sent_at(self, drop_id: DropID, sent_at: datetime) -> None: ...

    def resolve_delivery_address(self, user_id: UserID) -> str | None: ...

    def disable_channel(self, user_id: UserID, channel: NotificationChannel) -> None: ...


class SupabaseNotificationStore:
    """NotificationStore backed by the Supabase tables and auth admin API."""

    def __init__(self, client: Any = None):
        self.client = client if client is not None else get_supabase_client()

    def get_preferences(self, user_id: UserID) -> UserPreferences:
        """Preferences row for a user, or defaults when none exists."""
        response = (
            self.client.table("user_preferences")
            .select("email_notifications, weekly_digest")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        row = cast(dict[str, Any] | None, response.data if response else None)
        if not row:
            return UserPreferences(user_id=user_id)

        # NULL columns fall back to the channel defaults
        values = {key: value for key, value in row.items() if value is not None}
        return UserPreferences(user_id=user_id, **values)

    def get_digest_recipient_ids(self) -> list[UserID]:
        """Users who explicitly opted into the weekly digest."""
        response = (
            self.client.table("user_preferences")
            .select("user_id")
            .eq("weekly_digest", True)
            .execute()
        )
        return [UserID(row["user_id"]) for row in response.data or []]

    def get_drops_owned_by(self, user_id: UserID) -> list[Drop]:
        profiles_response = (
            self.client.table("profiles").select("id").eq("user_id", user_id).execute()
        )
        profile_ids = [profile["id"] for profile in profiles_response.data or []]
        if not profile_ids:
            return []

        drops_response = (
            self.client.table("drops")
            .select("id, label, profile_id, last_email_sent_at")
            .in_("profile_id", profile_ids)
            .execute()
        )
        return [Drop(**row) for row in drops_response.data or []]

    def get_submissions_for(
        self, drop_ids: list[DropID], window_start: datetime, window_end: datetime
    ) -> list[Submission]:
        """Non-deleted submissions in [window_start, window_end), most recent first."""
        if not drop_ids:
            return []

        response = (
            self.client.table("submissions")
            .select("id, created_at, name, email, note, files, drop_id, deleted_at")
            .in_("drop_id", drop_ids)
            .gte("created_at", ensure_utc(window_start).isoformat())
            .lt("created_at", ensure_utc(window_end).isoformat())
            .is_("deleted_at", "null")
            .order("created_at", desc=True)
            .execute()
        )
        return [Submission(**row) for row in response.data or []]

    def get_submission(self, submission_id: SubmissionID) -> SubmissionRecord | None:
        """Submission with its drop and the user who owns the drop's profile."""
        response = (
            self.client.table("submissions")
            .select(
                "id, created_at, name, email, note, files, drop_id, deleted_at, "
                "drops!inner(id, label, profile_id, last_email_sent_at, "
                "profiles!inner(id, user_id))"
            )
            .eq("id", submission_id)
            .maybe_single()
            .execute()
        )
        row = cast(dict[str, Any] | None, response.data if response else None)
        if not row:
            return None

        drop_data = dict(row.pop("drops", None) or {})
        if not drop_data:
            return None
        profile = drop_data.pop("profiles", None) or {}

        return SubmissionRecord(
            submission=Submission(**row),
            drop=Drop(**drop_data),
            owner_user_id=profile.get("user_id"),
        )

    def set_last_email_sent_at(self, drop_id: DropID, sent_at: datetime) -> None:
        """Advance the drop's rate-limit marker. Never moves it backwards."""
        timestamp = ensure_utc(sent_at).isoformat()
        (
            self.client.table("drops")
            .update({"last_email_sent_at": timestamp})
            .eq("id", drop_id)
            .or_(f"last_email_sent_at.is.null,last_email_sent_at.lt.{timestamp}")
            .execute()
        )

    def resolve_delivery_address(self, user_id: UserID) -> str | None:
        response = self.client.auth.admin.get_user_by_id(user_id)
        user = getattr(response, "user", None)
        return getattr(user, "email", None) or None

    def disable_channel(self, user_id: UserID, channel: NotificationChannel) -> None:
        column = CHANNEL_COLUMNS[channel]
        (
            self.client.table("user_preferences")
            .upsert({"user_id": user_id, column: False}, on_conflict="user_id")
            .execute()
        )
