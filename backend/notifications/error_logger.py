"""
Error logging utility for notification system.

Writes a timestamped report per failed send (immediate or digest) so a
failed recipient can be investigated after the batch has moved on.
"""

import os
from datetime import datetime
from typing import Any, Optional


def _log_dir() -> str:
    return os.getenv("NOTIFICATION_LOG_DIR") or os.path.join(
        os.path.dirname(__file__), "logs"
    )


def log_notification_error(
    error_type: str, error_message: str, context: dict[str, Any] | None = None
) -> Optional[str]:
    """
    Log a notification error to a timestamped file.

    Never raises: if the report can't be written, a warning is printed and
    None is returned so the caller's batch carries on.

    Args:
        error_type: Type of error ('immediate', 'digest', 'rate_limit_marker')
        error_message: The error message
        context: Optional dictionary with additional context (user_id, drop_id, ...)

    Returns:
        Path to the log file created, or None if it couldn't be written
    """
    log_dir = _log_dir()

    # Microseconds keep reports from the same batch apart
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    filename = os.path.join(log_dir, f"notification_error_{error_type}_{timestamp}.txt")

    try:
        os.makedirs(log_dir, exist_ok=True)
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Notification Error Report - {datetime.now()}\n")
            f.write("=" * 60 + "\n\n")
            f.write(f"Error Type: {error_type}\n")
            f.write(f"Error Message: {error_message}\n\n")

            if context:
                f.write("Context:\n")
                f.write("-" * 60 + "\n")
                for key, value in context.items():
                    f.write(f"{key}: {value}\n")
    except OSError as e:
        print(f"  ⚠️  Could not write error report to {log_dir}: {e}")
        print(f"    {error_type} error was: {error_message}")
        return None

    return filename
