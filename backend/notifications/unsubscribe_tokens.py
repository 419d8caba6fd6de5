"""
Token generation and validation for one-click unsubscribe links.

Uses cryptographically signed tokens with expiry for secure unsubscribe links.
Tokens are stateless (no database storage needed), carry the user id and the
channel being unsubscribed from, and expire after 90 days.
"""

import hashlib
import os
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config.notification_settings import UNSUBSCRIBE_TOKEN_MAX_AGE_DAYS
from models.types import NotificationChannel, UserID

UNSUBSCRIBE_SALT = "unsubscribe"
CHANNELS = ("immediate", "digest")


def _get_serializer() -> URLSafeTimedSerializer:
    """
    Get configured serializer for token generation and validation.

    Raises:
        ValueError: If UNSUBSCRIBE_SECRET_KEY environment variable not set
    """
    secret_key = os.getenv("UNSUBSCRIBE_SECRET_KEY")
    if not secret_key:
        raise ValueError("UNSUBSCRIBE_SECRET_KEY environment variable must be set.")

    return URLSafeTimedSerializer(
        secret_key,
        salt=UNSUBSCRIBE_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def generate_unsubscribe_token(user_id: str, channel: NotificationChannel) -> str:
    """
    Generate a signed unsubscribe token for one notification channel.

    Args:
        user_id: User's unique identifier (UUID)
        channel: 'immediate' or 'digest'

    Returns:
        URL-safe token string (format: payload.timestamp.signature)

    Raises:
        ValueError: If the channel is unknown or UNSUBSCRIBE_SECRET_KEY is not configured
    """
    if channel not in CHANNELS:
        raise ValueError(f"Unknown notification channel: {channel}")
    serializer = _get_serializer()
    return serializer.dumps({"user_id": user_id, "channel": channel})


def validate_unsubscribe_token(
    token: str, max_age_days: int = UNSUBSCRIBE_TOKEN_MAX_AGE_DAYS
) -> Optional[tuple[UserID, NotificationChannel]]:
    """
    Validate an unsubscribe token and extract the user id and channel.

    Never raises exceptions - returns None for any invalid token.

    Args:
        token: Token string from URL parameter
        max_age_days: Maximum token age in days (default: 90)

    Returns:
        (user_id, channel) if token is valid, None if invalid or expired
    """
    try:
        serializer = _get_serializer()
        max_age_seconds = max_age_days * 24 * 60 * 60
        payload = serializer.loads(token, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None

    if not isinstance(payload, dict):
        return None
    user_id = payload.get("user_id")
    channel = payload.get("channel")
    if not user_id or channel not in CHANNELS:
        return None
    return UserID(user_id), channel


def build_unsubscribe_url(
    user_id: str, channel: NotificationChannel, site_url: str
) -> str:
    """One-click unsubscribe link, or the settings page when signing isn't configured."""
    if not os.getenv("UNSUBSCRIBE_SECRET_KEY"):
        return f"{site_url}/settings"
    token = generate_unsubscribe_token(user_id, channel)
    return f"{site_url}/unsubscribe?token={token}"


def apply_unsubscribe(token: str, store) -> dict:
    """Turn off the channel named in a valid token."""
    result = validate_unsubscribe_token(token)
    if result is None:
        return {"success": False, "error": "Invalid or expired token"}

    user_id, channel = result
    store.disable_channel(user_id, channel)
    print(f"  ✓ Unsubscribed user {user_id} from {channel} emails")
    return {"success": True, "user_id": user_id, "channel": channel}
