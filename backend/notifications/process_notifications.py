"""
CLI script for sending notification emails.

Usage:
    # Send weekly digest emails (trailing 7 days ending at the start of today)
    uv run python -m notifications.process_notifications --weekly-digest

    # Dry run (render digests but don't send emails)
    uv run python -m notifications.process_notifications --weekly-digest --dry-run

    # Digest as if run on a given day
    uv run python -m notifications.process_notifications --weekly-digest --as-of 2026-01-26

    # Immediate email for a new submission
    uv run python -m notifications.process_notifications --submission-id <id> --user-id <id>

    # Apply a one-click unsubscribe token
    uv run python -m notifications.process_notifications --unsubscribe <token>
"""

import argparse
import json
import sys
from datetime import timezone

from notifications.data_access import SupabaseNotificationStore
from notifications.digest_dispatcher import send_weekly_digest
from notifications.submission_notifier import send_submission_notification
from notifications.unsubscribe_tokens import apply_unsubscribe
from shared.errors import ConfigurationError
from shared.utils import parse_date_string


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send drop notification emails")

    parser.add_argument(
        "--weekly-digest", action="store_true", help="Send weekly digest emails"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails)",
    )
    parser.add_argument(
        "--as-of",
        type=str,
        help="Compute the digest window as if run on this date (defaults to now)",
    )
    parser.add_argument("--submission-id", type=str, help="New submission to notify about")
    parser.add_argument("--user-id", type=str, help="Owner of the submission's drop")
    parser.add_argument("--unsubscribe", type=str, metavar="TOKEN", help="Apply an unsubscribe token")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.weekly_digest:
            now = None
            if args.as_of:
                now = parse_date_string(args.as_of)
                if now is None:
                    parser.error(f"Could not parse --as-of date: {args.as_of}")
                if now.tzinfo is None:
                    now = now.replace(tzinfo=timezone.utc)
            result = send_weekly_digest(now=now, dry_run=args.dry_run)
        elif args.submission_id or args.user_id:
            if not (args.submission_id and args.user_id):
                parser.error("--submission-id and --user-id must be given together")
            result = send_submission_notification(args.submission_id, args.user_id)
        elif args.unsubscribe:
            result = apply_unsubscribe(args.unsubscribe, SupabaseNotificationStore())
        else:
            parser.error("Must specify --weekly-digest, --submission-id/--user-id or --unsubscribe")
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2))
    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(main())
