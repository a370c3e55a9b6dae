from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from est.ledger import Task

from ._exceptions import ForecastInvariantError

# Real history shorter than this is padded with synthetic ratios.
MIN_HISTORY = 20


@dataclass(frozen=True, slots=True)
class AccuracyRatio:
    """
    One observation of estimate accuracy: ``estimated / actual`` hours of a
    finished task. 1.0 is a perfect estimate, 2.0 means the task took half
    as long as estimated, 0.5 twice as long.
    """

    timestamp: datetime
    estimated: timedelta
    ratio: float


def accuracy_ratio(task: Task) -> AccuracyRatio:
    """
    Accuracy of ``task``. A restarted task yields a single observation over
    its cumulative actual time, stamped with its latest completion.
    """
    if task.actual == timedelta(0):
        raise ForecastInvariantError(f"Expected non-zero actual time for task {task.id}.")
    return AccuracyRatio(
        timestamp=task.done_at or task.created_at,
        estimated=task.estimated,
        ratio=task.estimated / task.actual,
    )


def historical_ratios(tasks: Iterable[Task]) -> list[AccuracyRatio]:
    """
    Accuracy ratios of every done, non-deleted task with non-zero actual time:
    the evidence for evidence-based scheduling.
    """
    return [
        accuracy_ratio(t)
        for t in tasks
        if t.is_done and not t.deleted and t.actual != timedelta(0)
    ]


def ratios_after(ratios: Iterable[AccuracyRatio], t: datetime) -> list[AccuracyRatio]:
    return [r for r in ratios if r.timestamp > t]


def sort_by_time(ratios: Iterable[AccuracyRatio]) -> list[AccuracyRatio]:
    return sorted(ratios, key=lambda r: r.timestamp)


def ratio_values(ratios: Iterable[AccuracyRatio]) -> list[float]:
    return [r.ratio for r in ratios]


def pad_with_synthetic(
    real: Sequence[float],
    synthetic: Sequence[float],
    target: int = MIN_HISTORY,
) -> list[float]:
    """
    Copy of ``real`` topped up from ``synthetic`` until it holds ``target``
    ratios or ``synthetic`` runs out. A history of ``target`` or more real
    ratios is returned unchanged.
    """
    padded = [float(r) for r in real]
    missing = max(target - len(padded), 0)
    padded.extend(float(r) for r in list(synthetic)[:missing])
    return padded
