from .diagnostics import Diagnostic, DiagnosticLog, ErrorPolicy, Severity
from .engine import (
    AssembleOptions,
    AssemblyResult,
    Assembler,
    FileReferenceResolver,
    assemble,
)

__all__ = [
    "Diagnostic",
    "DiagnosticLog",
    "ErrorPolicy",
    "Severity",
    "AssembleOptions",
    "AssemblyResult",
    "Assembler",
    "FileReferenceResolver",
    "assemble",
]
