"""Listing Statistics — month window and bucketing."""

from datetime import datetime, timezone

from app.core.statistics import bucket_by_month, month_window_start


def test_window_start_crosses_year_boundary():
    now = datetime(2026, 3, 15, 10, tzinfo=timezone.utc)
    assert month_window_start(now, 6) == datetime(2025, 10, 1, tzinfo=timezone.utc)


def test_window_start_single_month_is_current_month():
    now = datetime(2026, 3, 15, tzinfo=timezone.utc)
    assert month_window_start(now, 1) == datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_bucket_by_month_sorted_and_sparse():
    created = [
        datetime(2026, 3, 2, tzinfo=timezone.utc),
        datetime(2026, 1, 31),
        datetime(2026, 3, 30, 23, 59, tzinfo=timezone.utc),
    ]
    assert bucket_by_month(created) == [
        {"date": "2026-01-01", "count": 1},
        {"date": "2026-03-01", "count": 2},
    ]


def test_bucket_by_month_empty():
    assert bucket_by_month([]) == []
