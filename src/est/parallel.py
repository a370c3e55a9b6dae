"""Scatter/gather over a thread pool for independent, pure computations."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def scatter_gather(
    fn: Callable[[T], R],
    items: Iterable[T],
    max_workers: int | None = None,
) -> list[R]:
    """
    Apply ``fn`` to every item concurrently and return the results in input
    order once all of them are collected. The first exception raised by any
    call propagates. ``max_workers=1`` runs inline.
    """
    work = list(items)
    if max_workers is not None and max_workers < 1:
        raise ValueError("max_workers must be at least 1.")
    if max_workers == 1 or len(work) <= 1:
        return [fn(item) for item in work]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(fn, work))
