from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

import numpy as np
import structlog

from est.calendar import BusinessCalendar
from est.ledger import TaskLedger
from est.parallel import scatter_gather

from ._exceptions import ForecastInvariantError
from .ratios import historical_ratios, pad_with_synthetic, ratio_values

log = structlog.get_logger()

# Trial count and percentile bucket count are the same number on purpose:
# to_percentile() reads bucket i as "i+1 trials in 100", which only means
# "percentile" when exactly 100 trials were run.
TRIALS = 100
BUCKETS = 100


def simulate(
    ratios: Sequence[float] | np.ndarray,
    estimate_hours: Sequence[float] | np.ndarray,
    rng: np.random.Generator,
    trials: int = TRIALS,
) -> np.ndarray:
    """
    Monte Carlo totals of actual hours. Each trial divides every estimate by
    an accuracy ratio drawn with replacement from ``ratios``, independently
    per task and per trial, and sums the results.
    """
    r = np.asarray(ratios, dtype=np.float64).reshape(-1)
    e = np.asarray(estimate_hours, dtype=np.float64).reshape(-1)
    if r.size == 0:
        raise ForecastInvariantError("Cannot simulate from an empty pool of accuracy ratios.")
    if not np.all(r > 0.0):
        raise ForecastInvariantError("Accuracy ratios must be positive.")

    picks = rng.integers(0, r.size, size=(trials, e.size))
    return (e / r[picks]).sum(axis=1)


def to_percentile(samples: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    Reduce at least 100 samples to 100 buckets where ``out[i]`` is the
    largest sample with at most ``i+1`` percent of samples at or below it.

    ``out[0]`` is pinned to the smallest sample so that the table spans the
    full range of outcomes.
    """
    ordered = np.sort(np.asarray(samples, dtype=np.float64).reshape(-1))
    n = ordered.size
    if n < BUCKETS:
        raise ValueError(f"to_percentile expects at least {BUCKETS} samples; got {n}.")

    out = np.empty(BUCKETS, dtype=np.float64)
    pct = BUCKETS - 1
    # Walk from the largest sample down so each bucket takes the largest
    # eligible value.
    for i in range(n - 1, -1, -1):
        if BUCKETS * i // n <= pct:
            out[pct] = ordered[i]
            pct -= 1
    if pct != -1:
        raise ForecastInvariantError(f"to_percentile left bucket {pct} unfilled.")
    out[0] = ordered[0]
    return out


class ForecastEngine:
    """
    Probabilistic delivery dates for pending work.

    Historical accuracy ratios are resampled to simulate how long the pending
    estimates will actually take; the resulting percentile table of working
    hours is mapped to calendar instants with the business calendar.
    """

    def __init__(
        self,
        calendar: BusinessCalendar,
        rng: np.random.Generator | None = None,
        workers: int | None = None,
    ) -> None:
        self._calendar = calendar
        self._rng = rng if rng is not None else np.random.default_rng()
        self._workers = workers

    def percentile_hours(
        self,
        ratios: Sequence[float] | np.ndarray,
        estimate_hours: Sequence[float] | np.ndarray,
    ) -> np.ndarray:
        return to_percentile(simulate(ratios, estimate_hours, self._rng))

    def forecast(
        self,
        now: datetime,
        ratios: Sequence[float] | np.ndarray,
        estimate_hours: Sequence[float] | np.ndarray,
    ) -> list[datetime]:
        """
        100 delivery instants; entry ``i`` is the date by which the pending
        work is done in ``i+1`` percent of simulated outcomes.
        """
        hours = self.percentile_hours(ratios, estimate_hours)

        def to_date(h: float) -> datetime:
            return self._calendar.time_after(now, timedelta(hours=float(h)))

        dates = scatter_gather(to_date, hours, self._workers)
        log.debug(
            "forecast",
            trials=TRIALS,
            ratios=len(ratios),
            tasks=len(estimate_hours),
            p50_hours=float(hours[49]),
            p99_hours=float(hours[99]),
        )
        return dates

    def schedule(
        self,
        now: datetime,
        ledger: TaskLedger,
        synthetic: Sequence[float] = (),
    ) -> list[datetime]:
        """Forecast the ledger's pending tasks from its own history."""
        pool = pad_with_synthetic(ratio_values(historical_ratios(ledger)), synthetic)
        estimates = [t.estimated_hours for t in ledger.pending()]
        return self.forecast(now, pool, estimates)

    @property
    def calendar(self) -> BusinessCalendar:
        return self._calendar

    def __repr__(self) -> str:
        return f"ForecastEngine(calendar={self._calendar!r}, workers={self._workers})"
