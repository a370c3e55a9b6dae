from est.errors import EstError


class CalendarError(EstError):
    """Base exception for all calendar-related errors."""


class InvalidScheduleError(CalendarError, ValueError):
    """Raised when workdays or work hours do not describe a valid schedule."""


class InvalidDurationError(CalendarError, ValueError):
    """Raised when a negative duration is passed to time_after()."""
