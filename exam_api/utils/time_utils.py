"""Time utilities."""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_seconds(value: datetime | None) -> int:
    """Whole seconds since the Unix epoch, 0 for missing values."""
    aware = ensure_utc(value)
    if aware is None:
        return 0
    return int(aware.timestamp())


def isoformat_utc(value: datetime | None) -> str | None:
    """Serialize datetime as an ISO-8601 UTC string."""
    aware = ensure_utc(value)
    return aware.isoformat() if aware else None
