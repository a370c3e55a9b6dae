from est.errors import EstError


class ForecastError(EstError):
    """Base exception for forecast errors."""


class ForecastInvariantError(RuntimeError):
    """
    A forecast precondition was broken by the caller, e.g. an accuracy ratio
    was requested for a task with zero actual time, or the ratio pool is
    empty. This is a programming error and is not meant to be caught.
    """
