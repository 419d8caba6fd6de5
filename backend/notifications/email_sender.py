"""
Email sending via Resend API for notification system.

This is the delivery gateway: it takes a rendered EmailMessage and reports
success (with the Resend email id) or failure. It never retries.
"""

import os
import threading
from typing import Any, Callable

import resend
from dotenv import load_dotenv
from html2text import HTML2Text

from config.notification_settings import (
    DEFAULT_FROM_EMAIL,
    DEFAULT_FROM_NAME,
    EMAIL_SEND_TIMEOUT_SECONDS,
)
from models import DeliveryResult, EmailMessage
from shared.errors import ConfigurationError

load_dotenv()

# Initialize Resend with API key from environment
resend.api_key = os.getenv("RESEND_API_KEY")

SendEmailFn = Callable[[EmailMessage], DeliveryResult]


class _SendTimeout(Exception):
    pass


def _call_with_timeout(fn: Callable[[Any], Any], arg: Any, timeout: float) -> Any:
    """
    Run fn(arg) on a daemon thread and wait at most ``timeout`` seconds.

    A call that never returns is abandoned; being a daemon, its thread does
    not keep the process alive at exit.
    """
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["value"] = fn(arg)
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=target, name="resend-send", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise _SendTimeout()
    if "error" in outcome:
        raise outcome["error"]
    return outcome.get("value")


def ensure_email_configured() -> None:
    """Raise ConfigurationError unless a Resend API key is available."""
    api_key = resend.api_key or os.getenv("RESEND_API_KEY")
    if not api_key:
        raise ConfigurationError("RESEND_API_KEY must be set")
    resend.api_key = api_key


def html_to_text(html: str) -> str:
    """Plain text version of an HTML body for clients that don't render HTML."""
    converter = HTML2Text()
    converter.ignore_images = True
    converter.body_width = 0
    return converter.handle(html).strip()


def _from_header() -> str:
    from_email = os.getenv("NOTIFICATION_FROM_EMAIL", DEFAULT_FROM_EMAIL)
    from_name = os.getenv("NOTIFICATION_FROM_NAME", DEFAULT_FROM_NAME)
    return f"{from_name} <{from_email}>"


def _build_params(message: EmailMessage) -> dict[str, Any]:
    return {
        "from": _from_header(),
        "to": message.to,
        "subject": message.subject,
        "html": message.html,
        "text": message.text or html_to_text(message.html),
    }


def send_email(
    message: EmailMessage, timeout: float = EMAIL_SEND_TIMEOUT_SECONDS
) -> DeliveryResult:
    """
    Send a rendered email through Resend.

    Args:
        message: Recipient, subject and rendered bodies
        timeout: Seconds to wait for Resend before giving up

    Returns:
        DeliveryResult with the Resend email id on success, the error text otherwise
    """
    if not resend.api_key:
        return DeliveryResult(success=False, error="Email service not configured")

    params = _build_params(message)

    try:
        response = _call_with_timeout(resend.Emails.send, params, timeout)
    except _SendTimeout:
        return DeliveryResult(
            success=False, error=f"Email send timed out after {timeout:g}s"
        )
    except Exception as e:
        return DeliveryResult(success=False, error=str(e) or type(e).__name__)

    email_id = response.get("id") if isinstance(response, dict) else None
    return DeliveryResult(success=True, id=email_id)


def dry_run_send(message: EmailMessage) -> DeliveryResult:
    """Stand-in sender for --dry-run: reports success without contacting Resend."""
    print(f"  [DRY RUN] Would send '{message.subject}' to {message.to}")
    return DeliveryResult(success=True, id=None)
