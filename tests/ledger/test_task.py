"""
tests/ledger/test_task.py

Covers:
  - Task name cleaning and length limits
  - Construction-time consistency checks
  - Status projection and its precedence
  - Hour conversions and repr
"""

from datetime import datetime, timedelta

import pytest

from est.ledger import (
    TASK_NAME_MAX_LEN,
    InvalidTaskNameError,
    LedgerInvariantError,
    Phase,
    Task,
    TaskStatus,
)

T0 = datetime(2024, 1, 1, 9, 0)


def hours(h):
    return timedelta(hours=h)


# ── Names ─────────────────────────────────────────────────────────────────────

class TestNames:

    def test_name_is_stripped(self):
        assert Task(name="  write docs \n", created_at=T0).name == "write docs"

    def test_empty_name_raises(self):
        with pytest.raises(InvalidTaskNameError):
            Task(name="   ", created_at=T0)

    def test_max_length_accepted(self):
        assert len(Task(name="x" * TASK_NAME_MAX_LEN, created_at=T0).name) == TASK_NAME_MAX_LEN

    def test_too_long_raises(self):
        with pytest.raises(InvalidTaskNameError):
            Task(name="x" * (TASK_NAME_MAX_LEN + 1), created_at=T0)

    def test_name_error_is_value_error(self):
        with pytest.raises(ValueError):
            Task(name="", created_at=T0)


# ── Construction invariants ───────────────────────────────────────────────────

class TestInvariants:

    def test_new_task_defaults(self):
        t = Task(name="a", created_at=T0)
        assert t.phase is Phase.NEW
        assert t.actual_updated_at is None
        assert t.actual == timedelta(0)
        assert not t.is_estimated
        assert t.is_never_started

    def test_ids_are_unique(self):
        assert Task(name="a", created_at=T0).id != Task(name="a", created_at=T0).id

    def test_started_phase_requires_accrual_instant(self):
        with pytest.raises(LedgerInvariantError):
            Task(name="a", created_at=T0, phase=Phase.ACTIVE)

    def test_new_phase_forbids_accrual_instant(self):
        with pytest.raises(LedgerInvariantError):
            Task(name="a", created_at=T0, actual_updated_at=T0)

    def test_deleted_active_is_rejected(self):
        with pytest.raises(LedgerInvariantError):
            Task(
                name="a",
                created_at=T0,
                phase=Phase.ACTIVE,
                actual_updated_at=T0,
                deleted=True,
            )

    def test_deleted_paused_is_allowed(self):
        t = Task(name="a", created_at=T0, phase=Phase.PAUSED, actual_updated_at=T0, deleted=True)
        assert t.status is TaskStatus.DELETED

    def test_equality_is_identity(self):
        a = Task(name="a", created_at=T0)
        b = Task(name="a", created_at=T0, id=a.id)
        assert a != b
        assert a == a


# ── Status projection ─────────────────────────────────────────────────────────

class TestStatus:

    def test_unestimated(self):
        t = Task(name="a", created_at=T0)
        assert t.status is TaskStatus.UNESTIMATED
        assert t.status_at == T0

    def test_estimated(self):
        t = Task(name="a", created_at=T0, estimated=hours(2), estimated_at=T0 + hours(1))
        assert t.status is TaskStatus.ESTIMATED
        assert t.status_at == T0 + hours(1)

    def test_started(self):
        t = Task(
            name="a",
            created_at=T0,
            estimated=hours(2),
            phase=Phase.ACTIVE,
            actual_updated_at=T0 + hours(2),
            started_at=T0 + hours(2),
        )
        assert t.status is TaskStatus.STARTED
        assert t.status_at == T0 + hours(2)

    def test_paused(self):
        t = Task(
            name="a",
            created_at=T0,
            phase=Phase.PAUSED,
            actual_updated_at=T0,
            paused_at=T0 + hours(3),
        )
        assert t.status is TaskStatus.PAUSED
        assert t.status_at == T0 + hours(3)

    def test_done(self):
        t = Task(
            name="a", created_at=T0, phase=Phase.DONE, actual_updated_at=T0, done_at=T0 + hours(4)
        )
        assert t.status is TaskStatus.DONE
        assert t.status_at == T0 + hours(4)

    def test_deleted_outranks_done(self):
        t = Task(
            name="a",
            created_at=T0,
            phase=Phase.DONE,
            actual_updated_at=T0,
            done_at=T0 + hours(1),
            deleted=True,
            deleted_at=T0 + hours(5),
        )
        assert t.status is TaskStatus.DELETED
        assert t.status_at == T0 + hours(5)

    def test_missing_event_instant_falls_back_to_creation(self):
        t = Task(name="a", created_at=T0, phase=Phase.DONE, actual_updated_at=T0)
        assert t.status_at == T0

    def test_sort_order_of_statuses(self):
        assert sorted(TaskStatus, reverse=True) == [
            TaskStatus.UNESTIMATED,
            TaskStatus.STARTED,
            TaskStatus.PAUSED,
            TaskStatus.ESTIMATED,
            TaskStatus.DONE,
            TaskStatus.DELETED,
        ]


def test_hour_conversions():
    t = Task(name="a", created_at=T0, estimated=timedelta(minutes=90))
    assert t.estimated_hours == pytest.approx(1.5)
    assert t.actual_hours == 0.0


def test_repr():
    t = Task(name="write parser", created_at=T0)
    r = repr(t)
    assert "write parser" in r
    assert "unestimated" in r
    assert str(t.id)[:8] in r
