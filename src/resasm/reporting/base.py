from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "TaskBook",
    "Reporter",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "format_diagnostic",
    "section",
    "task",
]


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


# Batch counters shown after a task name, in this order.
_STAT_KEYS = ("resources", "errors", "warnings", "bytes")


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time or self.start_time) - self.start_time

    def counter(self) -> str:
        return f" {self.completed}/{self.total}" if self.total is not None else ""

    def stats(self) -> str:
        parts = [f"{k}={self.meta[k]}" for k in _STAT_KEYS if k in self.meta]
        return f" [{' '.join(parts)}]" if parts else ""


class TaskBook:
    """Open task records keyed by id; shared by every reporter backend."""

    def __init__(self) -> None:
        self._open: Dict[str, TaskRecord] = {}

    def open(
        self, task_id: str, name: str, total: int | None, meta: Dict[str, Any]
    ) -> TaskRecord:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._open[task_id] = rec
        return rec

    def step(
        self, task_id: str, step: int, meta: Dict[str, Any]
    ) -> TaskRecord | None:
        rec = self._open.get(task_id)
        if rec is not None:
            rec.completed += step
            rec.meta.update(meta)
        return rec

    def close(
        self, task_id: str, status: TaskStatus, meta: Dict[str, Any]
    ) -> TaskRecord | None:
        rec = self._open.pop(task_id, None)
        if rec is not None:
            rec.status = status
            rec.end_time = time.time()
            rec.meta.update(meta)
        return rec

    def __bool__(self) -> bool:
        return bool(self._open)


_VERBOSITY: int = 0  # set by the CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


def format_diagnostic(message: str, fields: Dict[str, Any]) -> str:
    """``context:line: [CODE] message``; parts missing from ``fields`` are dropped."""
    head = ""
    context = fields.get("context")
    if context:
        line = fields.get("line") or 0
        head = f"{context}:{line}: " if line else f"{context}: "
    code = fields.get("code")
    if code:
        head += f"[{code}] "
    return head + message


class Reporter:
    supports_progress: bool = False

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        raise NotImplementedError

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    # Diagnostics may carry code/context/line/field/value_index fields.
    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def section(title: str) -> Iterator[None]:
    get_reporter().section(title)
    yield


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Dict[str, Any]]:
    """Run a reporter task; entries added to the yielded dict end up in the
    final ``end_task`` call."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    final: Dict[str, Any] = {}
    try:
        yield final
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **final)
        raise
    rep.end_task(task_id, TaskStatus.SUCCESS, **final)
