from __future__ import annotations

import sys
from typing import Any

from .base import Reporter, TaskBook, TaskStatus, format_diagnostic, get_verbosity

_MARKS = {
    TaskStatus.SUCCESS: "ok",
    TaskStatus.FAILED: "FAILED",
    TaskStatus.SKIPPED: "skipped",
}

_COLORS = {"INFO": "32", "ERROR": "31", "WARN": "33"}


class PlainReporter(Reporter):
    """Line oriented reporter; colors only when writing to a terminal."""

    def __init__(self, stream=None, use_color: bool | None = None):
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color
        self._book = TaskBook()

    def _line(self, label: str, text: str) -> None:
        if self.use_color and label in _COLORS:
            label = f"\x1b[{_COLORS[label]}m{label}\x1b[0m"
        self.stream.write(f"{label}: {text}\n")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._book.open(task_id, name, total, meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._book.step(task_id, step, meta)
        if rec is None or get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"#{rec.completed}"
        self.stream.write(f"   {rec.name}:{rec.counter()} {item}\n")

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._book.close(task_id, status, final_meta)
        if rec is None:
            return
        self.stream.write(
            f" {rec.name}{rec.counter()} {_MARKS.get(status, '?')} "
            f"({rec.duration:.2f}s){rec.stats()}\n"
        )

    def status(self, message: str, **fields: Any) -> None:
        self._line("INFO", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._line(f"VERB{level}", message)

    def error(self, message: str, **fields: Any) -> None:
        self._line("ERROR", format_diagnostic(message, fields))

    def warning(self, message: str, **fields: Any) -> None:
        self._line("WARN", format_diagnostic(message, fields))

    def section(self, title: str) -> None:
        self.stream.write(f"\n== {title} ==\n")
