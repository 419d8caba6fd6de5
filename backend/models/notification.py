"""Pydantic models for notification preferences, digests and dispatch results."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from models.types import DropID, UserID


class UserPreferences(BaseModel):
    """Per-user email preferences.

    Immediate notifications are opt-out (enabled when no row exists),
    the weekly digest is opt-in.
    """

    user_id: UserID
    email_notifications: bool = True
    weekly_digest: bool = False


class Recipient(BaseModel):
    """Owner being notified. Immutable for the duration of a dispatch run."""

    model_config = ConfigDict(frozen=True)

    id: UserID
    email: str | None = None
    immediate_notifications_enabled: bool = True
    digest_enabled: bool = False

    @classmethod
    def from_preferences(
        cls, preferences: UserPreferences, email: str | None = None
    ) -> "Recipient":
        return cls(
            id=preferences.user_id,
            email=email,
            immediate_notifications_enabled=preferences.email_notifications,
            digest_enabled=preferences.weekly_digest,
        )


class SubmissionSummary(BaseModel):
    """Compact per-submission line shown in a digest."""

    created_at: str
    name: str
    file_count: int = Field(..., ge=0)


class DropDigest(BaseModel):
    """Digest group for a single drop.

    ``count`` and ``files_count`` cover every submission in the window;
    only ``submissions`` (the sample) is capped.
    """

    drop_id: DropID
    drop_label: str
    count: int = Field(..., ge=0)
    files_count: int = Field(..., ge=0)
    submissions: list[SubmissionSummary] = Field(default_factory=list)
    overflow: int = Field(0, ge=0)

    @property
    def has_more(self) -> bool:
        return self.overflow > 0


class DigestSummary(BaseModel):
    """Everything a recipient receives in one digest email."""

    recipient_id: UserID
    window_start: datetime
    window_end: datetime
    total_submissions: int = Field(..., ge=1)
    total_files: int = Field(..., ge=0)
    drops: list[DropDigest] = Field(default_factory=list)


class DispatchError(BaseModel):
    recipient_id: UserID
    message: str


class DispatchResult(BaseModel):
    """Tally for one digest batch run. Never persisted."""

    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[DispatchError] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def processed(self) -> int:
        return self.succeeded + self.skipped + self.failed

    def record_success(self) -> None:
        self.succeeded += 1

    def record_skip(self) -> None:
        self.skipped += 1

    def record_failure(self, recipient_id: UserID, message: str) -> None:
        self.failed += 1
        self.errors.append(DispatchError(recipient_id=recipient_id, message=message))

    def to_response(self) -> dict:
        return self.model_dump(mode="json")


class EmailMessage(BaseModel):
    """Rendered email handed to the delivery gateway."""

    to: str = Field(..., min_length=3)
    subject: str
    html: str
    text: str | None = None


class DeliveryResult(BaseModel):
    """Gateway response: message id on success, error text on failure."""

    success: bool
    id: str | None = None
    error: str | None = None
