from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Union

import numpy as np

from ._exceptions import CalendarError, InvalidDurationError, InvalidScheduleError

DayLike = Union[date, datetime]
WeekdayLike = Union[int, str]
ClockLike = Union[time, str]

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_DAY_US: int = 24 * 60 * 60 * 1_000_000

# time_after() searches at most this far past its start instant.
_SEARCH_WINDOW = timedelta(days=365 * 100)

_CLOCK_12H = re.compile(r"^(\d{1,2}):(\d{2})\s*([ap]m)$")
_CLOCK_24H = re.compile(r"^(\d{1,2}):(\d{2})$")


# ── parsing helpers ──────────────────────────────────────────────────────────

def _parse_weekday(value: WeekdayLike) -> int:
    if isinstance(value, str):
        key = value.strip().lower()
        matches = [
            i for i, name in enumerate(_WEEKDAYS) if len(key) >= 3 and name.startswith(key)
        ]
        if len(matches) != 1:
            raise InvalidScheduleError(f"Unknown weekday {value!r}.")
        return matches[0]
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidScheduleError(f"Weekday must be a name or an index 0-6; got {value!r}.")
    return int(value)


def _parse_clock(value: ClockLike) -> time:
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise InvalidScheduleError(f"Work hour must be a time or a string; got {value!r}.")

    text = value.strip().lower()
    m12 = _CLOCK_12H.match(text)
    m24 = _CLOCK_24H.match(text)
    if m12:
        hour, minute = int(m12.group(1)), int(m12.group(2))
        if not 1 <= hour <= 12:
            raise InvalidScheduleError(f"Invalid 12-hour clock time {value!r}.")
        hour = hour % 12 + (12 if m12.group(3) == "pm" else 0)
    elif m24:
        hour, minute = int(m24.group(1)), int(m24.group(2))
    else:
        raise InvalidScheduleError(
            f"Cannot parse work hour {value!r}; expected e.g. '9:30am' or '17:30'."
        )
    if hour > 23 or minute > 59:
        raise InvalidScheduleError(f"Work hour out of range: {value!r}.")
    return time(hour, minute)


def _micros(t: time | datetime) -> int:
    """Wall-clock microseconds since midnight."""
    return ((t.hour * 60 + t.minute) * 60 + t.second) * 1_000_000 + t.microsecond


# ── schedule ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class WorkSchedule:
    """
    Weekly working pattern: which weekdays are workdays (Monday=0) and the
    ``[s1, e1, s2, e2, ...]`` clock times bounding working windows on each of
    them. Validated on construction.
    """

    workdays: frozenset[int]
    hours: tuple[time, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "workdays", frozenset(self.workdays))
        object.__setattr__(self, "hours", tuple(self.hours))

        for day in self.workdays:
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                raise InvalidScheduleError(f"Workdays must be indices 0-6; got {day!r}.")

        if not self.hours:
            raise InvalidScheduleError(
                "Work hours must not be empty; expected an even number of increasing times."
            )
        if len(self.hours) % 2 == 1:
            raise InvalidScheduleError(
                f"Work hours must have even length; got {len(self.hours)} times."
            )
        for t in self.hours:
            if not isinstance(t, time):
                raise InvalidScheduleError(f"Work hours must be datetime.time; got {t!r}.")
            if t.tzinfo is not None:
                raise InvalidScheduleError("Work hours are wall-clock times and must be naive.")
            if t.second or t.microsecond:
                raise InvalidScheduleError(f"Work hours have minute resolution; got {t}.")
        for i in range(1, len(self.hours)):
            if not self.hours[i - 1] < self.hours[i]:
                raise InvalidScheduleError(
                    f"Work hours must be strictly increasing; hours[{i - 1}]={self.hours[i - 1]} "
                    f"is not before hours[{i}]={self.hours[i]}.",
                    details={"index": i},
                )

    @classmethod
    def parse(
        cls,
        workdays: Iterable[WeekdayLike],
        workhours: Iterable[ClockLike],
    ) -> WorkSchedule:
        return cls(
            workdays=frozenset(_parse_weekday(d) for d in workdays),
            hours=tuple(_parse_clock(h) for h in workhours),
        )

    @property
    def windows(self) -> tuple[tuple[time, time], ...]:
        return tuple(zip(self.hours[0::2], self.hours[1::2]))

    @property
    def workday_length(self) -> timedelta:
        return timedelta(
            microseconds=sum(_micros(end) - _micros(start) for start, end in self.windows)
        )

    @property
    def weekmask(self) -> str:
        """Monday-first weekmask as understood by ``np.busday_count``."""
        return "".join("1" if i in self.workdays else "0" for i in range(7))


# ── calendar ─────────────────────────────────────────────────────────────────

class BusinessCalendar:
    """
    Working-time arithmetic over a :class:`WorkSchedule`.

    All instants are normalised to one reference frame before any arithmetic:
    the zone ``tz`` when given, else the system local zone. Naive instants are
    taken as wall-clock times in that frame. Business hours are wall-clock
    hours, so a window spanning a DST change counts its wall-clock length.
    """

    def __init__(self, schedule: WorkSchedule, tz: tzinfo | None = None) -> None:
        self._schedule = schedule
        self._tz = tz
        self._starts: np.ndarray = np.array(
            [_micros(t) for t in schedule.hours[0::2]], dtype=np.int64
        )
        self._ends: np.ndarray = np.array(
            [_micros(t) for t in schedule.hours[1::2]], dtype=np.int64
        )
        self._workday_us: int = int((self._ends - self._starts).sum())

    @classmethod
    def from_strings(
        cls,
        workdays: Iterable[WeekdayLike],
        workhours: Iterable[ClockLike],
        tz: tzinfo | None = None,
    ) -> BusinessCalendar:
        return cls(WorkSchedule.parse(workdays, workhours), tz=tz)

    # ── frame normalisation ──────────────────────────────────────────────

    def localize(self, t: datetime) -> datetime:
        """``t`` expressed in this calendar's reference frame."""
        if t.tzinfo is None:
            return t if self._tz is None else t.replace(tzinfo=self._tz)
        if self._tz is None:
            return t.astimezone().replace(tzinfo=None)
        return t.astimezone(self._tz)

    def _day(self, day: DayLike) -> date:
        if isinstance(day, datetime):
            return self.localize(day).date()
        return day

    def _within_day(self, day: date, lo: int, hi: int) -> int:
        """Working microseconds of ``day`` inside the wall-clock span [lo, hi)."""
        if day.weekday() not in self._schedule.workdays:
            return 0
        overlap = np.minimum(self._ends, hi) - np.maximum(self._starts, lo)
        return int(np.clip(overlap, 0, None).sum())

    # ── queries ──────────────────────────────────────────────────────────

    def is_workday(self, day: DayLike) -> bool:
        return self._day(day).weekday() in self._schedule.workdays

    def work_windows_on(self, day: DayLike) -> list[tuple[datetime, datetime]]:
        """
        Working windows on the calendar day of ``day``, in order; empty when
        that day is not a workday.
        """
        d = self._day(day)
        if d.weekday() not in self._schedule.workdays:
            return []
        zone = self._tz
        return [
            (datetime.combine(d, start, tzinfo=zone), datetime.combine(d, end, tzinfo=zone))
            for start, end in self._schedule.windows
        ]

    def duration_between(self, a: datetime, b: datetime) -> timedelta:
        """
        Working time between two instants, regardless of their order.

        Partial first and last days clip each working window to ``[a, b)``;
        every whole day in between contributes one workday length if it is a
        workday.
        """
        a, b = self.localize(a), self.localize(b)
        if b < a:
            a, b = b, a
        first, last = a.date(), b.date()

        if first == last:
            return timedelta(microseconds=self._within_day(first, _micros(a), _micros(b)))

        us = self._within_day(first, _micros(a), _DAY_US) + self._within_day(last, 0, _micros(b))
        if self._schedule.workdays:
            whole_days = int(
                np.busday_count(
                    np.datetime64(first + timedelta(days=1), "D"),
                    np.datetime64(last, "D"),
                    weekmask=self._schedule.weekmask,
                )
            )
            us += whole_days * self._workday_us
        return timedelta(microseconds=us)

    def time_after(self, start: datetime, d: timedelta) -> datetime:
        """
        Earliest instant at which ``d`` of working time has elapsed since
        ``start``.

        Lower-bound bisection over whole-second offsets from ``start``, up to
        100 years later. The result is the first such offset reaching ``d``,
        so it never lands in a gap between working windows and is at most
        one second past the exact instant.
        """
        if d < timedelta(0):
            raise InvalidDurationError(f"Negative duration unsupported: {d}.")
        start = self.localize(start)
        if d == timedelta(0):
            return start
        if self._workday_us == 0 or not self._schedule.workdays:
            raise CalendarError("Schedule has no working time; duration can never be consumed.")

        low, high = 0, int(_SEARCH_WINDOW.total_seconds())
        if self.duration_between(start, start + timedelta(seconds=high)) < d:
            raise CalendarError(
                f"Duration {d} exceeds the working time available in the search window.",
                details={"start": start.isoformat(), "duration": d.total_seconds()},
            )

        # elapsed(low) < d <= elapsed(high)
        while high - low > 1:
            mid = (low + high) // 2
            if self.duration_between(start, start + timedelta(seconds=mid)) >= d:
                high = mid
            else:
                low = mid
        return start + timedelta(seconds=high)

    def previous_workday(self, now: datetime) -> date:
        """Most recent workday strictly before the calendar date of ``now``."""
        if not self._schedule.workdays:
            raise CalendarError("Schedule has no workdays.")
        day = self.localize(now).date()
        while True:
            day -= timedelta(days=1)
            if day.weekday() in self._schedule.workdays:
                return day

    # ── properties / repr ────────────────────────────────────────────────

    @property
    def schedule(self) -> WorkSchedule:
        return self._schedule

    @property
    def tz(self) -> tzinfo | None:
        return self._tz

    @property
    def workday_length(self) -> timedelta:
        return timedelta(microseconds=self._workday_us)

    def __repr__(self) -> str:
        days = ",".join(_WEEKDAYS[i][:3] for i in sorted(self._schedule.workdays))
        hours = ",".join(t.strftime("%H:%M") for t in self._schedule.hours)
        return (
            f"BusinessCalendar(workdays=[{days}], "
            f"hours=[{hours}], "
            f"workday_length={self.workday_length}, "
            f"tz={self._tz!r})"
        )
