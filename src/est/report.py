"""Plain-data views over a ledger and a forecast, for presentation layers."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from est.calendar import BusinessCalendar
from est.forecast import BUCKETS, AccuracyRatio, ratios_after, sort_by_time
from est.ledger import Task, TaskLedger

HISTORY_DAYS = 90


def sparse_schedule(dates: Sequence[datetime]) -> list[tuple[int, datetime]]:
    """
    Every fifth percentile of a forecast: ``(0, dates[0])`` followed by
    ``(5k, dates[5k - 1])`` for k = 1..20.
    """
    if len(dates) != BUCKETS:
        raise ValueError(f"Expected {BUCKETS} forecast dates; got {len(dates)}.")
    rows = [(0, dates[0])]
    rows.extend((pct, dates[pct - 1]) for pct in range(5, BUCKETS + 1, 5))
    return rows


def accuracy_history(
    ratios: Iterable[AccuracyRatio],
    now: datetime,
    days: int = HISTORY_DAYS,
) -> list[AccuracyRatio]:
    """Recent accuracy ratios, oldest first; older history drops off."""
    return sort_by_time(ratios_after(ratios, now - timedelta(days=days)))


def yesterday(
    ledger: TaskLedger,
    calendar: BusinessCalendar,
    now: datetime,
) -> tuple[date, list[Task]]:
    """
    Activity on the most recent workday before ``now``: tasks still active,
    plus tasks whose current status was entered on that day.
    """
    day = calendar.previous_workday(now)
    tasks = [
        t
        for t in ledger.sort_by_status()
        if t.is_active or calendar.localize(t.status_at).date() == day
    ]
    return day, tasks
