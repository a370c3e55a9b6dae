# src/est/ledger/__init__.py
"""
est.ledger
~~~~~~~~~~

Task lifecycle and automatic time tracking. A TaskLedger owns an ordered
collection of tasks; starting, pausing and completing tasks shares elapsed
working time equally among every task that was active at each instant.

Basic usage::

    from datetime import datetime, timedelta
    from est.ledger import TaskLedger

    ledger = TaskLedger(calendar)
    task = ledger.add("write parser", now)
    ledger.estimate(task, timedelta(hours=4), now)
    ledger.start(task, now)
    ledger.complete(task, later)
    task.actual          # working time between now and later

Public API
----------
TaskLedger   The collection and its state transitions.
Task         A task record; mutate it only through its ledger.
TaskStatus   Human-facing status projection.
Phase        Lifecycle tag (new / active / paused / done).
accrue       The cohort accrual routine used by TaskLedger.
LedgerError  Base exception for rejected operations.
"""

from __future__ import annotations

from est.ledger._exceptions import (
    ActiveTaskError,
    AlreadyDeletedError,
    AlreadyStartedError,
    DeletedTaskError,
    InvalidDurationError,
    InvalidTaskNameError,
    LedgerError,
    LedgerInvariantError,
    NeverStartedError,
    NotActiveError,
    NotActiveOrPausedError,
    NotDeletedError,
    UnestimatedError,
)
from est.ledger.ledger import TaskLedger, accrue
from est.ledger.task import TASK_NAME_MAX_LEN, Phase, Task, TaskStatus

__all__ = [
    "TaskLedger",
    "Task",
    "TaskStatus",
    "Phase",
    "accrue",
    "TASK_NAME_MAX_LEN",
    "LedgerError",
    "LedgerInvariantError",
    "ActiveTaskError",
    "AlreadyDeletedError",
    "AlreadyStartedError",
    "DeletedTaskError",
    "InvalidDurationError",
    "InvalidTaskNameError",
    "NeverStartedError",
    "NotActiveError",
    "NotActiveOrPausedError",
    "NotDeletedError",
    "UnestimatedError",
]
