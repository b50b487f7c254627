"""Error definitions for resasm."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Assembly diagnostics
E_MISSING_FIELD = "E_MISSING_FIELD"
E_FIELD_ARITY = "E_FIELD_ARITY"
E_VALUE_TYPE = "E_VALUE_TYPE"
E_UNKNOWN_SYMBOL = "E_UNKNOWN_SYMBOL"
E_ENCODING_WIDTH = "E_ENCODING_WIDTH"
E_UNSUPPORTED_VALUE = "E_UNSUPPORTED_VALUE"
E_BAD_LITERAL = "E_BAD_LITERAL"
E_STRING_LENGTH = "E_STRING_LENGTH"
W_DEPRECATED_FIELD = "W_DEPRECATED_FIELD"

# Schema table validation
E_SCHEMA_WIDTH = "E_SCHEMA_WIDTH"
E_SCHEMA_OFFSET = "E_SCHEMA_OFFSET"
E_SCHEMA_DUP = "E_SCHEMA_DUP"
E_SCHEMA_EMPTY = "E_SCHEMA_EMPTY"
E_SCHEMA_MASK = "E_SCHEMA_MASK"

# Loading
E_LOAD = "E_LOAD"
E_NO_SCHEMA = "E_NO_SCHEMA"


@dataclass
class ResasmError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class SchemaError(ResasmError):
    pass


class EncodingWidthError(SchemaError):
    """Integer slot declared with a width outside {1, 2, 4, 8}."""


class AssemblyError(ResasmError):
    pass


class LoaderError(ResasmError):
    pass


def width_error(
    size: int, context: Optional[Dict[str, Any]] = None
) -> EncodingWidthError:
    return EncodingWidthError(
        code=E_ENCODING_WIDTH,
        message=f"Illegal integer encoding width: {size} (expected 1, 2, 4 or 8)",
        context=context,
    )


def load_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> LoaderError:
    return LoaderError(code=E_LOAD, message=message, context=context)


__all__ = [
    "ResasmError",
    "SchemaError",
    "EncodingWidthError",
    "AssemblyError",
    "LoaderError",
    "width_error",
    "load_error",
    "E_MISSING_FIELD",
    "E_FIELD_ARITY",
    "E_VALUE_TYPE",
    "E_UNKNOWN_SYMBOL",
    "E_ENCODING_WIDTH",
    "E_UNSUPPORTED_VALUE",
    "E_BAD_LITERAL",
    "E_STRING_LENGTH",
    "W_DEPRECATED_FIELD",
    "E_SCHEMA_WIDTH",
    "E_SCHEMA_OFFSET",
    "E_SCHEMA_DUP",
    "E_SCHEMA_EMPTY",
    "E_SCHEMA_MASK",
    "E_LOAD",
    "E_NO_SCHEMA",
]
