"""Listing Statistics — calendar-month bucketing for the dashboard chart.

Invariants:
    - Window covers the current month plus the previous (months - 1) months
    - Output sorted oldest first; months without listings are omitted
    - Bucketing done in Python so the query stays dialect-neutral (SQLite/PostgreSQL)
"""

from collections import Counter
from datetime import date, datetime, timezone

from app.core.datetimes import as_utc


def month_window_start(now: datetime, months: int = 6) -> datetime:
    """First instant of the month (months - 1) months before now's month."""
    now = as_utc(now)
    index = now.year * 12 + (now.month - 1) - (months - 1)
    year, month0 = divmod(index, 12)
    return datetime(year, month0 + 1, 1, tzinfo=timezone.utc)


def bucket_by_month(created: list[datetime]) -> list[dict]:
    counts = Counter(
        date(as_utc(ts).year, as_utc(ts).month, 1) for ts in created
    )
    return [
        {"date": month.isoformat(), "count": counts[month]}
        for month in sorted(counts)
    ]
