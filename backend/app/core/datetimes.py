"""UTC helpers — every stored and compared datetime is timezone-aware UTC.

Invariants:
    - utc_now() is the only clock read in core/ and services/
    - as_utc() normalizes naive values (SQLite drops tzinfo) by assuming UTC
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    return int(as_utc(value).timestamp() * 1000)
