"""
Immediate "new submission" emails.

One email per submission, limited to one per drop every RATE_LIMIT_WINDOW.
Rapid submissions to the same drop collapse into a single email; other
drops owned by the same user are limited independently.
"""

import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from config.notification_settings import (
    NOTIFICATION_TIMEZONE,
    RATE_LIMIT_WINDOW,
    SITE_URL,
)
from models import (
    Drop,
    EmailMessage,
    Failed,
    NotFound,
    Outcome,
    Recipient,
    Sent,
    SkippedDisabled,
    SkippedRateLimited,
    Submission,
    Unauthorized,
)
from models.types import SubmissionID, TemplateContext, UserID
from notifications.data_access import NotificationStore, SupabaseNotificationStore
from notifications.email_sender import SendEmailFn, ensure_email_configured, send_email
from notifications.email_templates import NEW_SUBMISSION, load_email_template
from notifications.error_logger import log_notification_error
from notifications.template_renderer import render
from notifications.unsubscribe_tokens import build_unsubscribe_url
from shared.errors import ConfigurationError
from shared.utils import ensure_utc, format_submitted_at

SUBJECT_TEMPLATE = "New submission: {{drop_label}}"


def check_rate_limit(
    drop: Drop, now: datetime, window: timedelta = RATE_LIMIT_WINDOW
) -> SkippedRateLimited | None:
    """Return a rate-limited outcome if the drop was emailed less than ``window`` ago."""
    if drop.last_email_sent_at is None:
        return None

    last_sent = ensure_utc(drop.last_email_sent_at)
    # A marker in the future (clock skew) counts as "just sent"
    elapsed = max(ensure_utc(now) - last_sent, timedelta(0))
    if elapsed >= window:
        return None

    remaining = window - elapsed
    return SkippedRateLimited(
        last_email_sent_at=last_sent,
        minutes_since_last_email=int(elapsed.total_seconds() // 60),
        minutes_remaining=math.ceil(remaining.total_seconds() / 60),
        seconds_remaining=remaining.total_seconds(),
    )


def build_submission_context(
    submission: Submission,
    drop: Drop,
    site_url: str,
    unsubscribe_url: str,
    now: datetime,
    tz: tzinfo | None = None,
) -> TemplateContext:
    """Template variables for the new-submission email."""
    return {
        "drop_label": drop.label or "Drop",
        "submitter_name": submission.name or "",
        "submitter_email": submission.email or "",
        "note": submission.note or "",
        "file_count": submission.file_count,
        "file_count_plural": submission.file_count != 1,
        "submitted_at": format_submitted_at(submission.created_at, tz),
        "dashboard_url": f"{site_url}/dashboard",
        "settings_url": f"{site_url}/settings",
        "unsubscribe_url": unsubscribe_url,
        "current_year": now.year,
    }


def notify(
    submission: Submission,
    drop: Drop,
    recipient: Recipient,
    *,
    store: NotificationStore,
    send_email_fn: SendEmailFn = send_email,
    now: datetime | None = None,
    site_url: str = SITE_URL,
    tz: tzinfo | None = None,
) -> Outcome:
    """
    Email the drop owner about a new submission, unless disabled or rate limited.

    The drop's last_email_sent_at marker is advanced only after the gateway
    reports success, so a failed send never rate-limits the next attempt.

    Args:
        submission: The new submission
        drop: Drop the submission belongs to (carries the rate-limit marker)
        recipient: Owner of the drop
        store: Data access used to resolve the address and persist the marker
        send_email_fn: Delivery gateway
        now: Current time (defaults to UTC now)
        site_url: Base URL for dashboard/settings links
        tz: Timezone used to display the submission time

    Returns:
        Sent, SkippedDisabled, SkippedRateLimited, NotFound('user') or Failed
    """
    if not recipient.immediate_notifications_enabled:
        print(f"  ⊘ Email notifications disabled for user {recipient.id}")
        return SkippedDisabled()

    now = ensure_utc(now or datetime.now(timezone.utc))

    rate_limited = check_rate_limit(drop, now)
    if rate_limited is not None:
        print(
            f"  ⊘ Rate limit: drop {drop.id} emailed "
            f"{rate_limited.minutes_since_last_email} minutes ago "
            f"({rate_limited.minutes_remaining} minutes remaining)"
        )
        return rate_limited

    address = recipient.email or store.resolve_delivery_address(recipient.id)
    if not address:
        print(f"  ⚠️  No email address for user {recipient.id}")
        return NotFound(resource="user")

    context = build_submission_context(
        submission,
        drop,
        site_url,
        build_unsubscribe_url(recipient.id, "immediate", site_url),
        now,
        tz or ZoneInfo(NOTIFICATION_TIMEZONE),
    )
    message = EmailMessage(
        to=address,
        subject=render(SUBJECT_TEMPLATE, context),
        html=render(load_email_template(NEW_SUBMISSION, "html"), context),
        text=render(load_email_template(NEW_SUBMISSION, "text"), context),
    )

    try:
        result = send_email_fn(message)
    except Exception as e:
        reason = str(e) or type(e).__name__
    else:
        reason = None if result.success else (result.error or "Failed to send email")

    if reason is not None:
        print(f"  ✗ Failed to email user {recipient.id} about drop {drop.id}: {reason}")
        log_notification_error(
            error_type="immediate",
            error_message=reason,
            context={
                "user_id": recipient.id,
                "drop_id": drop.id,
                "submission_id": submission.id,
            },
        )
        return Failed(reason=reason)

    drop.mark_notified(now)
    try:
        store.set_last_email_sent_at(drop.id, now)
    except Exception as e:
        # The email went out; report the stale marker instead of failing the send
        error_file = log_notification_error(
            error_type="rate_limit_marker",
            error_message=str(e),
            context={"drop_id": drop.id, "sent_at": now.isoformat()},
        )
        print(f"  ⚠️  Could not update last_email_sent_at for drop {drop.id}")
        if error_file:
            print(f"    Details logged to: {error_file}")

    print(f"  ✓ Sent new-submission email for drop {drop.id} to {address}")
    return Sent(email_id=result.id, sent_to=address, last_email_sent_at=now)


def send_submission_notification(
    submission_id: str,
    user_id: str,
    *,
    store: NotificationStore | None = None,
    send_email_fn: SendEmailFn | None = None,
    now: datetime | None = None,
    site_url: str = SITE_URL,
) -> dict[str, Any]:
    """
    Entry point for a newly created submission.

    Only configuration errors are raised; every other result, including
    unexpected errors, comes back as a JSON-serializable dict.

    Args:
        submission_id: The new submission
        user_id: User the notification is for (must own the submission's drop)
        store: Data access (defaults to Supabase)
        send_email_fn: Delivery gateway (defaults to Resend)
        now: Current time, for tests
        site_url: Base URL for links

    Returns:
        Response dict with a 'status' key and outcome-specific fields

    Raises:
        ConfigurationError: Supabase or Resend configuration is missing
    """
    if not submission_id or not user_id:
        return {"status": "invalid_request", "error": "Missing submission_id or user_id"}

    if store is None:
        store = SupabaseNotificationStore()
    if send_email_fn is None:
        ensure_email_configured()
        send_email_fn = send_email

    print(f"Processing new submission {submission_id} for user {user_id}")

    outcome: Outcome
    try:
        preferences = store.get_preferences(UserID(user_id))
        recipient = Recipient.from_preferences(preferences)

        if not recipient.immediate_notifications_enabled:
            outcome = SkippedDisabled()
        else:
            record = store.get_submission(SubmissionID(submission_id))
            if record is None:
                outcome = NotFound(resource="submission")
            elif record.owner_user_id != user_id:
                print("  ⚠️  Submission does not belong to user")
                outcome = Unauthorized()
            else:
                outcome = notify(
                    record.submission,
                    record.drop,
                    recipient,
                    store=store,
                    send_email_fn=send_email_fn,
                    now=now,
                    site_url=site_url,
                )
    except ConfigurationError:
        raise
    except Exception as e:
        error_file = log_notification_error(
            error_type="immediate",
            error_message=str(e),
            context={"submission_id": submission_id, "user_id": user_id},
        )
        print(f"  ✗ Error notifying user {user_id}")
        if error_file:
            print(f"    Details logged to: {error_file}")
        outcome = Failed(reason=str(e) or "Internal error")

    return {"status": outcome.status, **outcome.to_response()}
