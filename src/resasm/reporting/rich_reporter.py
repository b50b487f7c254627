from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .base import (
    Reporter,
    TaskBook,
    TaskRecord,
    TaskStatus,
    format_diagnostic,
    get_verbosity,
)

_STATUS_STYLE = {
    TaskStatus.SUCCESS: "[green]done[/]",
    TaskStatus.FAILED: "[bold red]failed[/]",
    TaskStatus.SKIPPED: "[dim]skipped[/]",
}


def _transient_from_env() -> bool:
    value = os.getenv("RESASM_PROGRESS_TRANSIENT", "0")
    return value.lower() in ("1", "true", "yes")


class RichReporter(Reporter):
    """Console reporter with a live progress bar per batch task."""

    supports_progress = True

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True, highlight=False)
        self._transient = _transient_from_env()
        self.progress: Progress | None = None
        self._book = TaskBook()
        self._bars: Dict[str, Any] = {}
        # Completion lines held back while a transient bar owns the screen.
        self._pending: List[str] = []

    def _bar(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TextColumn("[dim]{task.fields[item]}"),
                TimeElapsedColumn(),
                console=self.console,
                transient=self._transient,
            )
            self.progress.start()
        return self.progress

    def _summary(self, rec: TaskRecord) -> str:
        state = _STATUS_STYLE.get(rec.status, "")
        return (
            f"{escape(rec.name)}{rec.counter()} {state} "
            f"({rec.duration:.2f}s){escape(rec.stats())}"
        )

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._book.open(task_id, name, total, meta)
        if total is None:
            self.console.rule(escape(name))
            return
        self._bars[task_id] = self._bar().add_task(
            escape(name), total=total, item=""
        )

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._book.step(task_id, step, meta)
        bar = self._bars.get(task_id)
        if rec is None or bar is None or self.progress is None:
            return
        item = escape(str(meta.get("current_item", "")))
        self.progress.update(bar, completed=rec.completed, item=item)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._book.close(task_id, status, final_meta)
        if rec is None:
            return
        bar = self._bars.pop(task_id, None)
        if bar is not None and self.progress is not None and rec.total:
            self.progress.update(bar, completed=rec.total, item="")
        if self._transient:
            self._pending.append(self._summary(rec))
        else:
            self.console.print(self._summary(rec))
        if not self._book:
            self.flush()

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def error(self, message: str, **fields: Any) -> None:
        text = escape(format_diagnostic(message, fields))
        self.console.print(f"[bold red]ERROR[/]: {text}")

    def warning(self, message: str, **fields: Any) -> None:
        text = escape(format_diagnostic(message, fields))
        self.console.print(f"[yellow]WARN[/]: {text}")

    def section(self, title: str) -> None:
        self.console.rule(escape(title))

    def flush(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
                self._bars.clear()
        for line in self._pending:
            self.console.print(line)
        self._pending.clear()
