"""
Weekly digest dispatch.

Sends ONE email per opted-in user summarizing their submissions from the
trailing week. Users are processed sequentially; a failure for one user is
recorded in the tally and never stops the batch.
"""

import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from config.notification_settings import (
    DIGEST_SEND_INTERVAL_SECONDS,
    DIGEST_WINDOW_DAYS,
    NOTIFICATION_TIMEZONE,
    SITE_URL,
)
from models import (
    DigestSummary,
    DispatchResult,
    EmailMessage,
    Failed,
    Outcome,
    Recipient,
    Sent,
    SkippedNoActivity,
)
from models.types import TemplateContext, UserID
from notifications.data_access import NotificationStore, SupabaseNotificationStore
from notifications.digest_aggregator import aggregate
from notifications.email_sender import (
    SendEmailFn,
    dry_run_send,
    ensure_email_configured,
    send_email,
)
from notifications.email_templates import WEEKLY_DIGEST, load_email_template
from notifications.error_logger import log_notification_error
from notifications.template_renderer import render
from notifications.unsubscribe_tokens import build_unsubscribe_url
from shared.errors import ConfigurationError
from shared.utils import format_long_date, print_summary

SUBJECT_TEMPLATE = (
    "Your Weekly Digest - {{total_submissions}} new "
    "submission{{#if total_submissions_plural}}s{{/if}}"
)


def get_digest_window(
    now: datetime | None = None,
    tz: tzinfo | None = None,
    days: int = DIGEST_WINDOW_DAYS,
) -> tuple[datetime, datetime]:
    """Trailing ``days``-day window ending at the start of the current day in ``tz``."""
    tz = tz or ZoneInfo(NOTIFICATION_TIMEZONE)
    local_now = (now or datetime.now(timezone.utc)).astimezone(tz)
    window_end = datetime(local_now.year, local_now.month, local_now.day, tzinfo=tz)
    return window_end - timedelta(days=days), window_end


def build_digest_context(
    summary: DigestSummary,
    site_url: str,
    unsubscribe_url: str,
    now: datetime,
    tz: tzinfo | None = None,
) -> TemplateContext:
    """Template variables for the weekly digest, including nested per-drop lists."""
    # Show the last day actually covered; window_end itself is excluded
    last_covered = summary.window_end - timedelta(microseconds=1)

    return {
        "week_start": format_long_date(summary.window_start, tz),
        "week_end": format_long_date(last_covered, tz),
        "total_submissions": summary.total_submissions,
        "total_submissions_plural": summary.total_submissions != 1,
        "total_files": summary.total_files,
        "total_files_plural": summary.total_files != 1,
        "drops": [
            {
                "drop_label": drop.drop_label,
                "count": drop.count,
                "count_plural": drop.count != 1,
                "files_count": drop.files_count,
                "files_count_plural": drop.files_count != 1,
                "submissions": [
                    {
                        "created_at": item.created_at,
                        "name": item.name,
                        "file_count": item.file_count,
                        "file_count_plural": item.file_count != 1,
                    }
                    for item in drop.submissions
                ],
                "has_more": drop.has_more,
                "more_count": drop.overflow,
                "more_count_plural": drop.overflow != 1,
            }
            for drop in summary.drops
        ],
        "dashboard_url": f"{site_url}/dashboard",
        "settings_url": f"{site_url}/settings",
        "unsubscribe_url": unsubscribe_url,
        "current_year": now.year,
    }


def send_digest_to_recipient(
    recipient: Recipient,
    window_start: datetime,
    window_end: datetime,
    *,
    store: NotificationStore,
    send_email_fn: SendEmailFn = send_email,
    now: datetime | None = None,
    site_url: str = SITE_URL,
    tz: tzinfo | None = None,
) -> Outcome:
    """
    Aggregate, render and send one recipient's digest.

    Returns:
        SkippedNoActivity when there is nothing to report, Sent or Failed otherwise
    """
    tz = tz or ZoneInfo(NOTIFICATION_TIMEZONE)
    summary = aggregate(recipient, window_start, window_end, store=store, tz=tz)
    if summary is None:
        print(f"  ⊘ No submissions for user {recipient.id}, skipping")
        return SkippedNoActivity()

    address = recipient.email or store.resolve_delivery_address(recipient.id)
    if not address:
        return Failed(reason="User not found")

    context = build_digest_context(
        summary,
        site_url,
        build_unsubscribe_url(recipient.id, "digest", site_url),
        now or datetime.now(timezone.utc),
        tz,
    )
    result = send_email_fn(
        EmailMessage(
            to=address,
            subject=render(SUBJECT_TEMPLATE, context),
            html=render(load_email_template(WEEKLY_DIGEST, "html"), context),
            text=render(load_email_template(WEEKLY_DIGEST, "text"), context),
        )
    )

    if not result.success:
        return Failed(reason=result.error or "Failed to send email")

    print(
        f"  ✓ Sent digest to user {recipient.id} "
        f"({summary.total_submissions} submissions, {len(summary.drops)} drops)"
    )
    return Sent(email_id=result.id, sent_to=address)


def run_digest_batch(
    window_start: datetime,
    window_end: datetime,
    *,
    store: NotificationStore,
    send_email_fn: SendEmailFn = send_email,
    now: datetime | None = None,
    site_url: str = SITE_URL,
    tz: tzinfo | None = None,
    send_interval: float = DIGEST_SEND_INTERVAL_SECONDS,
    recipient_ids: list[UserID] | None = None,
) -> DispatchResult:
    """
    Send digests to every user with the weekly digest enabled.

    Every per-user exception is caught here and recorded as a failure, so
    ``processed == succeeded + skipped + failed`` holds for any run.

    Args:
        window_start: Inclusive start of the digest window
        window_end: Exclusive end of the digest window
        store: Data access
        send_email_fn: Delivery gateway
        now: Current time, for tests
        site_url: Base URL for links
        tz: Timezone used to display dates
        send_interval: Seconds to wait after each send attempt
        recipient_ids: Users to process (defaults to everyone with the digest enabled)

    Returns:
        DispatchResult tally
    """
    result = DispatchResult()
    if recipient_ids is None:
        recipient_ids = store.get_digest_recipient_ids()

    if not recipient_ids:
        print("No users with weekly digest enabled.")
        return result

    print(f"Found {len(recipient_ids)} users with weekly digest enabled")

    for recipient_id in recipient_ids:
        print(f"\nProcessing user {recipient_id}...")
        recipient = Recipient(id=recipient_id, digest_enabled=True)

        try:
            outcome = send_digest_to_recipient(
                recipient,
                window_start,
                window_end,
                store=store,
                send_email_fn=send_email_fn,
                now=now,
                site_url=site_url,
                tz=tz,
            )
        except Exception as e:
            outcome = Failed(reason=str(e) or type(e).__name__)

        if isinstance(outcome, SkippedNoActivity):
            result.record_skip()
            continue

        if isinstance(outcome, Sent):
            result.record_success()
        else:
            message = outcome.reason if isinstance(outcome, Failed) else outcome.status
            result.record_failure(recipient_id, message)
            print(f"  ✗ Failed to send to user {recipient_id}: {message}")
            error_file = log_notification_error(
                error_type="digest",
                error_message=message,
                context={
                    "user_id": recipient_id,
                    "window_start": window_start.isoformat(),
                    "window_end": window_end.isoformat(),
                },
            )
            if error_file:
                print(f"    Error details logged to: {error_file}")

        # Rate limiting between sends
        if send_interval > 0:
            time.sleep(send_interval)

    return result


def send_weekly_digest(
    *,
    store: NotificationStore | None = None,
    send_email_fn: SendEmailFn | None = None,
    now: datetime | None = None,
    site_url: str = SITE_URL,
    dry_run: bool = False,
    send_interval: float = DIGEST_SEND_INTERVAL_SECONDS,
) -> dict[str, Any]:
    """
    Entry point for the scheduled weekly digest.

    A failure to list recipients is returned as {'error': ...}. Failures
    for individual recipients are part of the returned tally.

    Args:
        store: Data access (defaults to Supabase)
        send_email_fn: Delivery gateway (defaults to Resend)
        now: Current time; the window is the 7 days before the start of its day
        site_url: Base URL for links
        dry_run: Render everything but don't send
        send_interval: Seconds to wait between sends

    Returns:
        {processed, succeeded, skipped, failed, errors: [{recipient_id, message}]}

    Raises:
        ConfigurationError: Supabase or Resend configuration is missing
    """
    if store is None:
        store = SupabaseNotificationStore()
    if dry_run:
        send_email_fn = dry_run_send
    elif send_email_fn is None:
        ensure_email_configured()
        send_email_fn = send_email

    tz = ZoneInfo(NOTIFICATION_TIMEZONE)
    window_start, window_end = get_digest_window(now, tz)
    print(
        f"Processing weekly digest for {window_start.isoformat()} "
        f"to {window_end.isoformat()}"
    )

    try:
        recipient_ids = store.get_digest_recipient_ids()
    except ConfigurationError:
        raise
    except Exception as e:
        error_file = log_notification_error(
            error_type="digest",
            error_message=f"Failed to fetch digest recipients: {e}",
            context={"window_start": window_start.isoformat()},
        )
        print("  ✗ Could not load digest recipients.")
        if error_file:
            print(f"    Details logged to: {error_file}")
        return {"error": "Failed to fetch user preferences"}

    result = run_digest_batch(
        window_start,
        window_end,
        store=store,
        send_email_fn=send_email_fn,
        now=now,
        site_url=site_url,
        tz=tz,
        send_interval=send_interval,
        recipient_ids=recipient_ids,
    )

    print_summary("Weekly Digest", result.succeeded, result.skipped, result.failed)
    return result.to_response()
