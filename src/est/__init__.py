"""
est
~~~

Estimation and time-tracking engine: business-hours calendar arithmetic,
automatic time accrual across concurrently active tasks, and Monte Carlo
delivery forecasts from historical estimate accuracy.

Every operation takes its "now" explicitly; nothing here reads the system
clock.
"""

from __future__ import annotations

from est.calendar import BusinessCalendar, CalendarError, WorkSchedule
from est.errors import EstError
from est.forecast import AccuracyRatio, ForecastEngine
from est.ledger import LedgerError, Task, TaskLedger, TaskStatus

__version__ = "0.1.0"

__all__ = [
    "BusinessCalendar",
    "WorkSchedule",
    "TaskLedger",
    "Task",
    "TaskStatus",
    "ForecastEngine",
    "AccuracyRatio",
    "EstError",
    "CalendarError",
    "LedgerError",
]
