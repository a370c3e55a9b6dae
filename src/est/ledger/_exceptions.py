from est.errors import EstError


class LedgerError(EstError):
    """Base exception for rejected task operations. No task was mutated."""

    def __init__(self, message: str, *, task_id: object = None) -> None:
        super().__init__(message, details={"task_id": str(task_id)} if task_id else None)


class InvalidTaskNameError(LedgerError, ValueError):
    """Raised when a task name is empty or too long."""


class InvalidDurationError(LedgerError, ValueError):
    """Raised when a negative duration is estimated or logged."""


class AlreadyStartedError(LedgerError):
    """Raised when estimating a task that was started, or starting an active task."""


class DeletedTaskError(LedgerError):
    """Raised when starting a deleted task."""


class UnestimatedError(LedgerError):
    """Raised when starting a task without an estimate."""


class NotActiveError(LedgerError):
    """Raised when pausing a task which isn't active."""


class NotActiveOrPausedError(LedgerError):
    """Raised when completing a task which is neither active nor paused."""


class ActiveTaskError(LedgerError):
    """Raised when deleting or undeleting an active task."""


class AlreadyDeletedError(LedgerError):
    """Raised when deleting a task which is already deleted."""


class NotDeletedError(LedgerError):
    """Raised when undeleting a task which isn't deleted."""


class NeverStartedError(LedgerError):
    """Raised when logging time against a task which was never started."""


class LedgerInvariantError(RuntimeError):
    """
    A ledger invariant was broken, e.g. accrual was handed a task that isn't
    active, or an operation named a task the ledger does not own. This is a
    programming error and is not meant to be caught.
    """
