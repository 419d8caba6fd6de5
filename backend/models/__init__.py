"""Pydantic models for data validation and type checking."""

from models.drop import Drop, Submission, SubmissionFile, SubmissionRecord
from models.notification import (
    DeliveryResult,
    DigestSummary,
    DispatchError,
    DispatchResult,
    DropDigest,
    EmailMessage,
    Recipient,
    SubmissionSummary,
    UserPreferences,
)
from models.outcomes import (
    Failed,
    NotFound,
    Outcome,
    Sent,
    SkippedDisabled,
    SkippedNoActivity,
    SkippedRateLimited,
    Unauthorized,
)

__all__ = [
    "Drop",
    "Submission",
    "SubmissionFile",
    "SubmissionRecord",
    "UserPreferences",
    "Recipient",
    "SubmissionSummary",
    "DropDigest",
    "DigestSummary",
    "DispatchError",
    "DispatchResult",
    "EmailMessage",
    "DeliveryResult",
    "Outcome",
    "Sent",
    "SkippedDisabled",
    "SkippedRateLimited",
    "SkippedNoActivity",
    "Failed",
    "NotFound",
    "Unauthorized",
]
