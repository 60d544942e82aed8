"""
Date and timestamp helpers for CryptoNews.
"""
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC timestamp with second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec='seconds')


def now_iso() -> str:
    return to_iso(utc_now())


def today() -> str:
    """Today's date (UTC) as YYYY-MM-DD."""
    return utc_now().strftime('%Y-%m-%d')


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RFC 822 (RSS) or ISO-8601 (Atom) timestamp.

    Naive timestamps are assumed to be UTC.

    Returns:
        A timezone-aware datetime, or None if the value cannot be parsed
    """
    if not value:
        return None

    value = value.strip()
    parsed = None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_valid_date(value: str) -> bool:
    """Check a YYYY-MM-DD date key."""
    if not DATE_PATTERN.match(value or ''):
        return False
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return False
    return True
