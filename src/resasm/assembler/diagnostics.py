"""Structured diagnostics collected during assembly.

Validation problems never unwind the assembly of a resource under the default
policy: they are recorded here, forwarded to the active reporter and the
caller inspects :attr:`DiagnosticLog.has_errors` afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import AssemblyError
from ..reporting import Reporter, get_reporter

__all__ = ["Severity", "ErrorPolicy", "Diagnostic", "DiagnosticLog"]


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorPolicy(Enum):
    # Record the error, fill the slot with its default and keep going.
    CONTINUE = "continue"
    # Raise AssemblyError on the first error.
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    code: str
    severity: Severity
    message: str
    context: str = ""
    line: int = 0
    field: Optional[str] = None
    value_index: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.context,
            "line": self.line,
        }
        if self.field is not None:
            out["field"] = self.field
        if self.value_index is not None:
            out["value_index"] = self.value_index
        return out

    def __str__(self) -> str:
        where = f"{self.context}:{self.line}" if self.line else self.context
        return f"{where}: {self.code}: {self.message}"


class DiagnosticLog:
    def __init__(
        self,
        policy: ErrorPolicy = ErrorPolicy.CONTINUE,
        reporter: Reporter | None = None,
    ) -> None:
        self.policy = policy
        self._reporter = reporter
        self.records: List[Diagnostic] = []

    @property
    def reporter(self) -> Reporter:
        return self._reporter or get_reporter()

    def _fields(self, d: Diagnostic) -> Dict[str, Any]:
        return {k: v for k, v in d.to_dict().items() if k != "message"}

    def error(
        self,
        context: str,
        line: int,
        message: str,
        *,
        code: str,
        field: Optional[str] = None,
        value_index: Optional[int] = None,
    ) -> Diagnostic:
        d = Diagnostic(
            code, Severity.ERROR, message, context, line, field, value_index
        )
        self.records.append(d)
        self.reporter.error(message, **self._fields(d))
        if self.policy is ErrorPolicy.ABORT:
            raise AssemblyError(code=code, message=message, context=d.to_dict())
        return d

    def warning(
        self,
        context: str,
        line: int,
        message: str,
        *,
        code: str,
        field: Optional[str] = None,
        value_index: Optional[int] = None,
    ) -> Diagnostic:
        d = Diagnostic(
            code, Severity.WARNING, message, context, line, field, value_index
        )
        self.records.append(d)
        self.reporter.warning(message, **self._fields(d))
        return d

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.records if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.records if not d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.records)

    def codes(self) -> List[str]:
        return [d.code for d in self.records]
