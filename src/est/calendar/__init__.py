# src/est/calendar/__init__.py
"""
est.calendar
~~~~~~~~~~~~

Business-hours time arithmetic. A WorkSchedule names the working weekdays and
the clock-time windows that count as working hours on each of them; a
BusinessCalendar answers "how much working time lies between two instants"
and its inverse "when will this much working time have elapsed".

Basic usage::

    from datetime import datetime, timedelta
    from est.calendar import BusinessCalendar

    cal = BusinessCalendar.from_strings(
        ["mon", "tue", "wed", "thu", "fri"],
        ["9:00am", "12:00pm", "1:00pm", "5:00pm"],
    )
    monday = datetime(2024, 1, 1, 9, 0)
    cal.duration_between(monday, datetime(2024, 1, 3, 9, 0))   # → 14h
    cal.time_after(monday, timedelta(hours=7))                 # → Mon 17:00

time_after() is a bisection over whole seconds and returns the earliest
matching instant, never a point inside a non-working gap.

Public API
----------
WorkSchedule          Validated weekly working pattern.
BusinessCalendar      Working-time queries over a WorkSchedule.
CalendarError         Base exception for all calendar-related errors.
InvalidScheduleError  Raised for malformed workdays or work hours.
InvalidDurationError  Raised for negative durations passed to time_after().
"""

from __future__ import annotations

from est.calendar._exceptions import CalendarError, InvalidDurationError, InvalidScheduleError
from est.calendar.calendar import BusinessCalendar, WorkSchedule

__all__ = [
    "BusinessCalendar",
    "WorkSchedule",
    "CalendarError",
    "InvalidScheduleError",
    "InvalidDurationError",
]
