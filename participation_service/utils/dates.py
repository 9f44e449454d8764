"""
Timestamps are kept as naive UTC so SQLite and PostgreSQL compare them the same way.
"""

from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value):
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value):
    """
    Parse an ISO-8601 string (a trailing 'Z' is accepted) into naive UTC.
    Returns None for None/empty input; raises ValueError on garbage.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc_naive(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_utc_naive(datetime.fromisoformat(text))


def isoformat(value):
    return value.isoformat() + "Z" if value else None
