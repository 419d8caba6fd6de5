"""Factory functions for creating test drop and submission data."""

import uuid
from datetime import datetime, timezone
from typing import Any

from models import Drop, Submission


def create_test_drop(
    drop_id: str | None = None,
    label: str | None = "Portfolio Uploads",
    profile_id: str = "profile_1",
    last_email_sent_at: datetime | None = None,
    **overrides,
) -> Drop:
    """Factory for creating a Drop."""
    data: dict[str, Any] = {
        "id": drop_id or f"drop_{uuid.uuid4().hex[:8]}",
        "label": label,
        "profile_id": profile_id,
        "last_email_sent_at": last_email_sent_at,
    }
    data.update(overrides)
    return Drop(**data)


def create_test_submission(
    drop_id: str = "drop_1",
    submission_id: str | None = None,
    created_at: datetime | None = None,
    name: str | None = "Jane Doe",
    email: str | None = "jane@example.com",
    note: str | None = None,
    file_count: int = 1,
    **overrides,
) -> Submission:
    """
    Factory for creating a Submission.

    Args:
        drop_id: Drop the submission belongs to
        submission_id: Submission ID (defaults to random)
        created_at: Creation time (defaults to 2026-01-20 12:00 UTC)
        name: Submitter name (None for anonymous)
        email: Submitter email
        note: Optional note
        file_count: Number of attached files to generate
        **overrides: Override any field

    Returns:
        Submission model
    """
    data: dict[str, Any] = {
        "id": submission_id or f"sub_{uuid.uuid4().hex[:8]}",
        "drop_id": drop_id,
        "created_at": created_at or datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc),
        "name": name,
        "email": email,
        "note": note,
        "files": [
            {"path": f"uploads/{drop_id}/file_{i}.pdf", "size": 1024}
            for i in range(file_count)
        ],
    }
    data.update(overrides)
    return Submission(**data)


def create_submission_row(**overrides) -> dict[str, Any]:
    """Raw submissions table row as returned by Supabase."""
    row: dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "created_at": "2026-01-20T12:00:00+00:00",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "note": None,
        "files": [{"path": "uploads/a.pdf", "size": 10}],
        "drop_id": "drop_1",
        "deleted_at": None,
    }
    row.update(overrides)
    return row
