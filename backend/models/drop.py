"""Pydantic models for drops and the submissions they receive."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import DropID, ProfileID, SubmissionID, UserID
from shared.utils import ensure_utc


class SubmissionFile(BaseModel):
    """A single uploaded file attached to a submission."""

    model_config = ConfigDict(extra="allow")

    path: str = ""
    name: str | None = None
    size: int | None = Field(None, ge=0)


class Submission(BaseModel):
    """A file submission made to a drop. Read-only for the notification engine."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: SubmissionID
    drop_id: DropID
    created_at: datetime
    name: str | None = None
    email: str | None = None
    note: str | None = None
    files: list[SubmissionFile] = Field(default_factory=list)
    deleted_at: datetime | None = None

    @field_validator("files", mode="before")
    @classmethod
    def _coerce_files(cls, value: Any) -> list[Any]:
        # Storage paths may be stored as bare strings; anything else is "no files"
        if not isinstance(value, list):
            return []
        return [{"path": item} if isinstance(item, str) else item for item in value]

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class Drop(BaseModel):
    """A named upload target owned by a profile.

    ``last_email_sent_at`` is the rate-limit marker for immediate
    notifications and only ever moves forward.
    """

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: DropID
    label: str | None = None
    profile_id: ProfileID | None = None
    last_email_sent_at: datetime | None = None

    def mark_notified(self, sent_at: datetime) -> bool:
        """Advance the marker to ``sent_at``. Returns False if that would move it back."""
        current = self.last_email_sent_at
        if current is not None and ensure_utc(current) >= ensure_utc(sent_at):
            return False
        self.last_email_sent_at = sent_at
        return True


class SubmissionRecord(BaseModel):
    """A submission joined with its drop and the user who owns that drop."""

    submission: Submission
    drop: Drop
    owner_user_id: UserID | None = None
