"""
Notification system for drop owners.

This module handles:
- Rendering email templates (variables, conditionals, loops)
- Immediate, rate-limited emails for new submissions
- Aggregating submissions into weekly digests
- Dispatching digests to every opted-in user via Resend
"""

from .template_renderer import render
from .submission_notifier import notify, send_submission_notification
from .digest_aggregator import aggregate
from .digest_dispatcher import run_digest_batch, send_weekly_digest

__all__ = [
    'render',
    'notify',
    'send_submission_notification',
    'aggregate',
    'run_digest_batch',
    'send_weekly_digest',
]
