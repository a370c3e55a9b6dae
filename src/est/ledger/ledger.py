from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Iterator, Sequence
from uuid import UUID

import structlog

from est.calendar import BusinessCalendar

from ._exceptions import (
    ActiveTaskError,
    AlreadyDeletedError,
    AlreadyStartedError,
    DeletedTaskError,
    InvalidDurationError,
    LedgerInvariantError,
    NeverStartedError,
    NotActiveError,
    NotActiveOrPausedError,
    NotDeletedError,
    UnestimatedError,
)
from .task import Phase, Task, clean_name

log = structlog.get_logger()


def accrue(calendar: BusinessCalendar, active: Sequence[Task], end: datetime) -> None:
    """
    Share the working time elapsed up to ``end`` among ``active`` tasks.

    Tasks are advanced in cohorts: the tasks with the lowest
    ``actual_updated_at`` are caught up together to the next-lowest
    ``actual_updated_at`` (or ``end``), each receiving an equal share of the
    working time in that span. At every instant each of the ``k`` tasks
    active at that instant therefore accrues ``1/k`` of working time, and a
    task never accrues time from before it joined.
    """
    if not active:
        return
    for task in active:
        if not task.is_active or task.deleted:
            raise LedgerInvariantError(f"Accrual expects only active tasks; got {task!r}.")

    pending = list(active)
    while True:
        lowest = min(t.actual_updated_at for t in pending)
        if lowest >= end:
            return

        cohort = [t for t in pending if t.actual_updated_at == lowest]
        later = [t.actual_updated_at for t in pending if t.actual_updated_at > lowest]
        boundary = min(min(later), end) if later else end

        span = calendar.duration_between(lowest, boundary)
        share = span / len(cohort)
        for task in cohort:
            task.actual += share
            task.actual_updated_at = boundary

        log.debug(
            "accrued",
            cohort_size=len(cohort),
            start=lowest.isoformat(),
            end=boundary.isoformat(),
            share_seconds=share.total_seconds(),
        )


class TaskLedger:
    """
    Ordered collection of tasks with automatic time tracking.

    Every transition that changes the set of active tasks first catches up
    accrual for the tasks that were active until ``now``. Each operation
    validates before it mutates anything, so a rejected operation leaves the
    ledger untouched.

    The ledger is not thread-safe; callers serialise mutations.
    """

    def __init__(self, calendar: BusinessCalendar, tasks: Iterable[Task] = ()) -> None:
        self._calendar = calendar
        self._tasks: list[Task] = list(tasks)

    # ── ownership ────────────────────────────────────────────────────────

    def _own(self, task: Task) -> Task:
        if not any(t is task for t in self._tasks):
            raise LedgerInvariantError(f"Task {task.id} does not belong to this ledger.")
        return task

    def _accrue(self, now: datetime) -> None:
        accrue(self._calendar, self.active(), now)

    # ── lifecycle ────────────────────────────────────────────────────────

    def add(self, name: str, now: datetime) -> Task:
        task = Task(name=name, created_at=now)
        self._tasks.append(task)
        log.debug("task_added", task_id=str(task.id))
        return task

    def rename(self, task: Task, name: str) -> None:
        self._own(task).name = clean_name(name)

    def estimate(self, task: Task, duration: timedelta, now: datetime) -> None:
        self._own(task)
        if not task.is_never_started:
            raise AlreadyStartedError("Cannot re-estimate a task which has been started.", task_id=task.id)
        if duration < timedelta(0):
            raise InvalidDurationError(f"Estimate must be non-negative; got {duration}.", task_id=task.id)
        task.estimated = duration
        task.estimated_at = now
        log.debug("task_estimated", task_id=str(task.id), hours=task.estimated_hours)

    def start(self, task: Task, now: datetime) -> None:
        self._own(task)
        if task.deleted:
            raise DeletedTaskError("Cannot start deleted task.", task_id=task.id)
        if not task.is_estimated:
            raise UnestimatedError("Cannot start unestimated task.", task_id=task.id)
        if task.is_active:
            raise AlreadyStartedError("Cannot start task which is already started.", task_id=task.id)

        # The newly started task must not share in time elapsed before now.
        self._accrue(now)
        task.phase = Phase.ACTIVE
        task.actual_updated_at = now
        task.started_at = now
        log.debug("task_started", task_id=str(task.id), active=len(self.active()))

    def pause(self, task: Task, now: datetime) -> None:
        self._own(task)
        if not task.is_active:
            raise NotActiveError("Cannot pause a task which isn't started.", task_id=task.id)

        # Accrual runs with this task still active so it gets its share up to now.
        self._accrue(now)
        task.phase = Phase.PAUSED
        task.paused_at = now
        log.debug("task_paused", task_id=str(task.id), actual_hours=task.actual_hours)

    def complete(self, task: Task, now: datetime) -> None:
        self._own(task)
        if not (task.is_active or task.is_paused):
            raise NotActiveOrPausedError(
                "Cannot mark done a task which isn't started or paused.", task_id=task.id
            )
        if task.deleted:
            raise DeletedTaskError("Cannot mark done a deleted task.", task_id=task.id)

        if task.is_active:
            self._accrue(now)
        task.phase = Phase.DONE
        task.done_at = now
        log.debug("task_done", task_id=str(task.id), actual_hours=task.actual_hours)

    def delete(self, task: Task, now: datetime) -> None:
        self._own(task)
        if task.is_active:
            raise ActiveTaskError("Cannot delete task which is started.", task_id=task.id)
        if task.deleted:
            raise AlreadyDeletedError("Task is already deleted.", task_id=task.id)
        task.deleted = True
        task.deleted_at = now
        log.debug("task_deleted", task_id=str(task.id))

    def undelete(self, task: Task) -> None:
        self._own(task)
        if task.is_active:
            raise ActiveTaskError("Cannot undelete task which is started.", task_id=task.id)
        if not task.deleted:
            raise NotDeletedError("Cannot undelete task which isn't deleted.", task_id=task.id)
        task.deleted = False
        log.debug("task_undeleted", task_id=str(task.id))

    def log_manual(self, task: Task, duration: timedelta, now: datetime) -> None:
        """
        Add ``duration`` to a task's actual time directly, bypassing accrual.
        The caller is responsible for not double counting an interval that
        automatic accrual also covers.
        """
        self._own(task)
        if task.is_never_started:
            raise NeverStartedError(
                "Cannot add actual time to a task which has never been started.", task_id=task.id
            )
        if duration < timedelta(0):
            raise InvalidDurationError(f"Logged time must be non-negative; got {duration}.", task_id=task.id)
        task.actual += duration
        task.actual_updated_at = now
        log.debug("time_logged", task_id=str(task.id), seconds=duration.total_seconds())

    # ── lookups ──────────────────────────────────────────────────────────

    def get(self, task_id: UUID) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def find_by_id_prefix(self, prefix: str) -> Task | None:
        """First task whose id starts with ``prefix``; None for an empty prefix."""
        if not prefix:
            return None
        for task in self._tasks:
            if str(task.id).startswith(prefix):
                return task
        return None

    def active(self) -> list[Task]:
        return [t for t in self._tasks if t.is_active and not t.deleted]

    def done(self) -> list[Task]:
        return [t for t in self._tasks if t.is_done and not t.deleted]

    def pending(self) -> list[Task]:
        """Estimated tasks that were never started: the input to a forecast."""
        return [
            t for t in self._tasks if not t.deleted and t.is_estimated and t.is_never_started
        ]

    def sort_by_status(self) -> list[Task]:
        return sorted(self._tasks, key=lambda t: (t.status, t.status_at), reverse=True)

    def sort_by_started_at(self) -> list[Task]:
        started = [t for t in self._tasks if t.started_at is not None]
        return sorted(started, key=lambda t: t.started_at, reverse=True)

    # ── container protocol / properties ──────────────────────────────────

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task: object) -> bool:
        return any(t is task for t in self._tasks)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def calendar(self) -> BusinessCalendar:
        return self._calendar

    def __repr__(self) -> str:
        return (
            f"TaskLedger(tasks={len(self._tasks)}, "
            f"active={len(self.active())}, "
            f"pending={len(self.pending())})"
        )
