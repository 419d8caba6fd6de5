"""Outcomes returned by the notifier and the digest dispatcher.

Skips and failures are values, not exceptions. Every outcome converts to
the JSON-serializable response returned by the trigger functions.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class Sent(BaseModel):
    status: Literal["sent"] = "sent"
    email_id: str | None = None
    sent_to: str
    last_email_sent_at: datetime | None = None

    def to_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {
            "success": True,
            "email_id": self.email_id,
            "sent_to": self.sent_to,
        }
        if self.last_email_sent_at is not None:
            response["last_email_sent_at"] = self.last_email_sent_at.isoformat()
        return response


class SkippedDisabled(BaseModel):
    status: Literal["skipped_disabled"] = "skipped_disabled"

    def to_response(self) -> dict[str, Any]:
        return {
            "skipped": True,
            "reason": "disabled",
            "message": "Email notifications disabled",
        }


class SkippedRateLimited(BaseModel):
    status: Literal["skipped_rate_limited"] = "skipped_rate_limited"
    last_email_sent_at: datetime
    minutes_since_last_email: int = Field(..., ge=0)
    minutes_remaining: int = Field(..., ge=0)
    seconds_remaining: float = Field(..., ge=0)

    def to_response(self) -> dict[str, Any]:
        return {
            "skipped": True,
            "reason": "rate_limited",
            "message": "Rate limited",
            "last_email_sent_at": self.last_email_sent_at.isoformat(),
            "minutes_since_last_email": self.minutes_since_last_email,
            "minutes_remaining": self.minutes_remaining,
        }


class SkippedNoActivity(BaseModel):
    status: Literal["skipped_no_activity"] = "skipped_no_activity"

    def to_response(self) -> dict[str, Any]:
        return {
            "skipped": True,
            "reason": "no_activity",
            "message": "No submissions in window",
        }


class Failed(BaseModel):
    status: Literal["failed"] = "failed"
    reason: str

    def to_response(self) -> dict[str, Any]:
        return {"error": self.reason}


class NotFound(BaseModel):
    status: Literal["not_found"] = "not_found"
    resource: str

    def to_response(self) -> dict[str, Any]:
        return {"error": f"{self.resource.capitalize()} not found"}


class Unauthorized(BaseModel):
    status: Literal["unauthorized"] = "unauthorized"

    def to_response(self) -> dict[str, Any]:
        return {"error": "Unauthorized"}


Outcome = Annotated[
    Union[
        Sent,
        SkippedDisabled,
        SkippedRateLimited,
        SkippedNoActivity,
        Failed,
        NotFound,
        Unauthorized,
    ],
    Field(discriminator="status"),
]
