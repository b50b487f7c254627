from __future__ import annotations

import json
import sys
from typing import Any, Dict, List

from .base import Reporter, TaskBook, TaskStatus, get_verbosity

# "Batch summary: resources=3 errors=0" also yields a structured summary event.
_SUMMARY_PREFIXES = {
    "schema summary": "schema",
    "batch summary": "batch",
}


def _summary_fields(message: str) -> Dict[str, str] | None:
    head, _, tail = message.partition(":")
    kind = _SUMMARY_PREFIXES.get(head.strip().lower())
    if kind is None:
        return None
    pairs = dict(tok.split("=", 1) for tok in tail.split() if "=" in tok)
    return {"summary_type": kind, **pairs}


class JsonLinesReporter(Reporter):
    """One JSON object per line on stdout, for tooling."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._book = TaskBook()

    def _emit(self, event: str, **payload: Any) -> None:
        payload["event"] = event
        self.stream.write(json.dumps(payload, sort_keys=True, default=str) + "\n")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._book.open(task_id, name, total, meta)
        self._emit("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._book.step(task_id, step, meta)
        if rec is not None:
            self._emit("task_progress", id=task_id, completed=rec.completed, **meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._book.close(task_id, status, final_meta)
        if rec is None:
            return
        self._emit(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def status(self, message: str, **fields: Any) -> None:
        summary = _summary_fields(message)
        if summary is not None:
            self._emit("summary", raw=message, **summary, **fields)
        self._emit("status", message=message, level="info", **fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._emit(
                "status", message=message, level=f"verbose{level}", **fields
            )

    def error(self, message: str, **fields: Any) -> None:
        self._emit("diagnostic", message=message, level="error", **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("diagnostic", message=message, level="warning", **fields)

    def section(self, title: str) -> None:
        self._emit("section", title=title)


class MemoryReporter(Reporter):
    """Keeps every event as a dict in ``events``; handy for tests and tooling."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []

    def _record(self, event: str, **payload: Any) -> None:
        self.events.append({"event": event, **payload})

    def of_kind(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._record("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        self._record("task_progress", id=task_id, step=step, **meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        self._record(
            "task_end", id=task_id, status=status.name.lower(), **final_meta
        )

    def status(self, message: str, **fields: Any) -> None:
        self._record("status", message=message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._record("error", message=message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._record("warning", message=message, **fields)

    def section(self, title: str) -> None:
        self._record("section", title=title)
