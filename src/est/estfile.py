"""
The estfile: one user's tasks and synthetic ratios on disk, as JSON.

This module is the only boundary where Task records are serialised. Loading
and dumping both build fresh objects, so nothing on disk or in a returned
dict shares state with a live ledger.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID

import numpy as np
import structlog

from est.errors import EstError
from est.forecast import synthetic_ratios
from est.ledger import LedgerInvariantError, Phase, Task

log = structlog.get_logger()

ESTFILE_VERSION = 1
ESTFILE_MODE = 0o600


class EstFileError(EstError):
    """Raised when an estfile cannot be read or decoded."""


@dataclass
class EstFile:
    version: int = ESTFILE_VERSION
    tasks: list[Task] = field(default_factory=list)
    # Stored so forecasts padded with them are stable between runs.
    synthetic_ratios: list[float] = field(default_factory=list)


# ── task records ─────────────────────────────────────────────────────────────

def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": str(task.id),
        "name": task.name,
        "created_at": _dt(task.created_at),
        "estimated": task.estimated.total_seconds(),
        "estimated_at": _dt(task.estimated_at),
        "actual": task.actual.total_seconds(),
        "actual_updated_at": _dt(task.actual_updated_at),
        "phase": task.phase.value,
        "deleted": task.deleted,
        "started_at": _dt(task.started_at),
        "paused_at": _dt(task.paused_at),
        "done_at": _dt(task.done_at),
        "deleted_at": _dt(task.deleted_at),
    }


def task_from_dict(record: dict[str, Any]) -> Task:
    try:
        return Task(
            id=UUID(record["id"]),
            name=record["name"],
            created_at=_parse_dt(record["created_at"]),
            estimated=timedelta(seconds=record.get("estimated", 0.0)),
            estimated_at=_parse_dt(record.get("estimated_at")),
            actual=timedelta(seconds=record.get("actual", 0.0)),
            actual_updated_at=_parse_dt(record.get("actual_updated_at")),
            phase=Phase(record.get("phase", Phase.NEW.value)),
            deleted=bool(record.get("deleted", False)),
            started_at=_parse_dt(record.get("started_at")),
            paused_at=_parse_dt(record.get("paused_at")),
            done_at=_parse_dt(record.get("done_at")),
            deleted_at=_parse_dt(record.get("deleted_at")),
        )
    except (KeyError, TypeError, ValueError, LedgerInvariantError) as e:
        raise EstFileError(f"Malformed task record: {e}", details={"record": record}) from e


# ── files ────────────────────────────────────────────────────────────────────

def default_estfile(rng: np.random.Generator | None = None) -> EstFile:
    return EstFile(
        version=ESTFILE_VERSION,
        tasks=[],
        synthetic_ratios=[float(r) for r in synthetic_ratios(rng=rng)],
    )


def dumps(estfile: EstFile) -> str:
    return json.dumps(
        {
            "version": estfile.version,
            "tasks": [task_to_dict(t) for t in estfile.tasks],
            "synthetic_ratios": [float(r) for r in estfile.synthetic_ratios],
        },
        indent=2,
    )


def loads(text: str) -> EstFile:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise EstFileError(f"Estfile is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise EstFileError("Estfile must contain a JSON object.")
    return EstFile(
        version=int(data.get("version", ESTFILE_VERSION)),
        tasks=[task_from_dict(r) for r in data.get("tasks", [])],
        synthetic_ratios=[float(r) for r in data.get("synthetic_ratios", [])],
    )


def write_estfile(estfile: EstFile, path: str | Path) -> None:
    """
    Atomically replace ``path`` with ``estfile``. The data goes to a sibling
    temp file that is owner-only before anything is written to it.
    """
    text = dumps(estfile)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, ESTFILE_MODE)
    try:
        with os.fdopen(fd, "w") as f:
            # O_CREAT ignores the mode for a leftover temp file.
            os.fchmod(f.fileno(), ESTFILE_MODE)
            f.write(text)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    os.replace(tmp, path)
    log.debug("estfile_written", path=str(path), tasks=len(estfile.tasks))


def load_estfile(path: str | Path, rng: np.random.Generator | None = None) -> EstFile:
    """Read the estfile at ``path``, creating a default one if it is missing."""
    path = Path(path)
    if not path.exists():
        estfile = default_estfile(rng)
        write_estfile(estfile, path)
        log.info("estfile_created", path=str(path))
        return estfile
    return loads(path.read_text())
