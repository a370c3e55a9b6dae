from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from uuid import UUID, uuid4

from ._exceptions import InvalidTaskNameError, LedgerInvariantError

TASK_NAME_MAX_LEN = 120


class Phase(Enum):
    """Lifecycle tag of a task. ``deleted`` is tracked separately."""

    NEW = "new"  # never started
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"


class TaskStatus(IntEnum):
    """
    One-dimensional projection of a task's state, for humans.

    Values double as a sort key: sorting by status descending lists
    unestimated work first and deleted work last.
    """

    DELETED = 0
    DONE = 1
    ESTIMATED = 2
    PAUSED = 3
    STARTED = 4
    UNESTIMATED = 5


def clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidTaskNameError("Task name cannot be empty.")
    if len(cleaned) > TASK_NAME_MAX_LEN:
        raise InvalidTaskNameError(f"Task name can be at most {TASK_NAME_MAX_LEN} characters.")
    return cleaned


@dataclass(eq=False)
class Task:
    """
    The unit of estimation. A task is created unestimated, estimated any
    number of times until it is first started, then moves between active,
    paused and done. Deletion is orthogonal to the phase.

    ``actual_updated_at`` is the instant up to which ``actual`` has been
    accrued; it is ``None`` exactly when the task was never started.

    Tasks are mutated only through a :class:`~est.ledger.TaskLedger`, since
    accrual for one task depends on every other active task.
    """

    name: str
    created_at: datetime
    id: UUID = field(default_factory=uuid4)
    estimated: timedelta = timedelta(0)
    estimated_at: datetime | None = None
    actual: timedelta = timedelta(0)
    actual_updated_at: datetime | None = None
    phase: Phase = Phase.NEW
    deleted: bool = False

    # Most recent instant of each event; informational only.
    started_at: datetime | None = None
    paused_at: datetime | None = None
    done_at: datetime | None = None
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        self.name = clean_name(self.name)
        if (self.phase is Phase.NEW) != (self.actual_updated_at is None):
            raise LedgerInvariantError(
                f"Task {self.id}: phase {self.phase.value} is inconsistent with "
                f"actual_updated_at={self.actual_updated_at}."
            )
        if self.deleted and self.phase is Phase.ACTIVE:
            raise LedgerInvariantError(f"Task {self.id} cannot be both deleted and active.")

    # ── predicates ───────────────────────────────────────────────────────

    @property
    def is_estimated(self) -> bool:
        return self.estimated != timedelta(0)

    @property
    def is_never_started(self) -> bool:
        return self.phase is Phase.NEW

    @property
    def is_active(self) -> bool:
        return self.phase is Phase.ACTIVE

    @property
    def is_paused(self) -> bool:
        return self.phase is Phase.PAUSED

    @property
    def is_done(self) -> bool:
        return self.phase is Phase.DONE

    # ── status projection ────────────────────────────────────────────────

    @property
    def status(self) -> TaskStatus:
        return self._status()[0]

    @property
    def status_at(self) -> datetime:
        """When the task entered its current status."""
        return self._status()[1]

    def _status(self) -> tuple[TaskStatus, datetime]:
        # Order matters: deleted outranks every phase, and any phase other
        # than NEW outranks the estimated/unestimated distinction.
        if self.deleted:
            return TaskStatus.DELETED, self.deleted_at or self.created_at
        if self.phase is Phase.DONE:
            return TaskStatus.DONE, self.done_at or self.created_at
        if self.phase is Phase.PAUSED:
            return TaskStatus.PAUSED, self.paused_at or self.created_at
        if self.phase is Phase.ACTIVE:
            return TaskStatus.STARTED, self.started_at or self.created_at
        if self.is_estimated:
            return TaskStatus.ESTIMATED, self.estimated_at or self.created_at
        return TaskStatus.UNESTIMATED, self.created_at

    @property
    def estimated_hours(self) -> float:
        return self.estimated / timedelta(hours=1)

    @property
    def actual_hours(self) -> float:
        return self.actual / timedelta(hours=1)

    def __repr__(self) -> str:
        return (
            f"Task(id={str(self.id)[:8]}, name={self.name!r}, "
            f"status={self.status.name.lower()}, "
            f"estimated={self.estimated}, actual={self.actual})"
        )
