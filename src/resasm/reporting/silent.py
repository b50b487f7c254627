from __future__ import annotations

from typing import Any

from .base import Reporter


class SilentReporter(Reporter):
    """No-op reporter (quiet mode)."""

    def _ignore(self, *args: Any, **kwargs: Any) -> None:
        pass

    start_task = advance = end_task = _ignore
    status = verbose = error = warning = section = _ignore
