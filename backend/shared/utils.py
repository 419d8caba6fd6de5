from datetime import datetime, timezone, tzinfo
from dateutil import parser as date_parser


def parse_date_string(date_str: str) -> datetime | None:
    """Parse various date formats into a datetime."""
    if not date_str:
        return None
    try:
        return date_parser.parse(date_str, fuzzy=True)
    except (ValueError, OverflowError, TypeError):
        return None


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_submitted_at(value: datetime, tz: tzinfo | None = None) -> str:
    """Medium date, short time: 'Jan 24, 2026, 12:30 PM'."""
    local = ensure_utc(value).astimezone(tz or timezone.utc)
    return f"{local:%b} {local.day}, {local.year}, {_clock(local)}"


def format_short_timestamp(value: datetime, tz: tzinfo | None = None) -> str:
    """Digest line timestamp: 'Jan 24, 12:30 PM'."""
    local = ensure_utc(value).astimezone(tz or timezone.utc)
    return f"{local:%b} {local.day}, {_clock(local)}"


def format_long_date(value: datetime, tz: tzinfo | None = None) -> str:
    """Digest window date: 'January 24, 2026'."""
    local = ensure_utc(value).astimezone(tz or timezone.utc)
    return f"{local:%B} {local.day}, {local.year}"


def print_summary(label: str, sent: int, skipped: int, failed: int) -> None:
    """Print processing summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] {label} Complete!")
    print(f"{'=' * 60}")
    print(f"✓ Sent:     {sent}")
    print(f"⊘ Skipped:  {skipped}")
    print(f"✗ Failed:   {failed}")
    print(f"  Total:    {sent + skipped + failed}")
    print(f"{'=' * 60}\n")
