"""
Aggregation of a recipient's submissions into a weekly digest.

Counts always cover every submission in the window; only the list of
individual submissions shown per drop is capped at DIGEST_SAMPLE_SIZE.
"""

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from config.notification_settings import DIGEST_SAMPLE_SIZE
from models import DigestSummary, Drop, DropDigest, Recipient, Submission, SubmissionSummary
from models.types import DropID
from notifications.data_access import NotificationStore
from shared.utils import ensure_utc, format_short_timestamp


def aggregate(
    recipient: Recipient,
    window_start: datetime,
    window_end: datetime,
    *,
    store: NotificationStore,
    tz: tzinfo | None = None,
) -> Optional[DigestSummary]:
    """
    Build the digest for one recipient over [window_start, window_end).

    Args:
        recipient: Digest recipient
        window_start: Inclusive start of the window
        window_end: Exclusive end of the window
        store: Data access for drops and submissions
        tz: Timezone used to display submission times

    Returns:
        DigestSummary, or None when the recipient has no submissions in the window
    """
    drops = store.get_drops_owned_by(recipient.id)
    if not drops:
        print(f"  No drops found for user {recipient.id}")
        return None

    submissions = store.get_submissions_for(
        [drop.id for drop in drops], window_start, window_end
    )
    groups = group_submissions_by_drop(
        submissions, drops, window_start, window_end, tz=tz
    )
    if not groups:
        return None

    return DigestSummary(
        recipient_id=recipient.id,
        window_start=window_start,
        window_end=window_end,
        total_submissions=sum(group.count for group in groups),
        total_files=sum(group.files_count for group in groups),
        drops=groups,
    )


def group_submissions_by_drop(
    submissions: Iterable[Submission],
    drops: Iterable[Drop],
    window_start: datetime,
    window_end: datetime,
    sample_size: int = DIGEST_SAMPLE_SIZE,
    tz: tzinfo | None = None,
) -> list[DropDigest]:
    """
    Group submissions per drop, most recent first.

    Drops are ordered by their most recent submission. Submissions that are
    deleted, outside the window, or for drops not in ``drops`` are ignored.
    """
    drops_by_id = {drop.id: drop for drop in drops}
    start = ensure_utc(window_start)
    end = ensure_utc(window_end)

    in_window = [
        submission
        for submission in submissions
        if submission.drop_id in drops_by_id
        and not submission.is_deleted
        and start <= ensure_utc(submission.created_at) < end
    ]
    # sorted() is stable, so equal timestamps keep the order the store returned
    in_window = sorted(
        in_window, key=lambda s: ensure_utc(s.created_at), reverse=True
    )

    grouped: dict[DropID, list[Submission]] = {}
    for submission in in_window:
        grouped.setdefault(submission.drop_id, []).append(submission)

    return [
        _summarize_drop(drops_by_id[drop_id], drop_submissions, sample_size, tz)
        for drop_id, drop_submissions in grouped.items()
    ]


def _summarize_drop(
    drop: Drop,
    submissions: list[Submission],
    sample_size: int,
    tz: tzinfo | None,
) -> DropDigest:
    count = len(submissions)
    return DropDigest(
        drop_id=drop.id,
        drop_label=drop.label or "Unnamed Drop",
        count=count,
        files_count=sum(submission.file_count for submission in submissions),
        submissions=[
            SubmissionSummary(
                created_at=format_short_timestamp(submission.created_at, tz),
                name=submission.name or "Anonymous",
                file_count=submission.file_count,
            )
            for submission in submissions[:sample_size]
        ],
        overflow=max(0, count - sample_size),
    )
