"""Static validation of schema tables.

Checks run once, before any resource is assembled:
 1. structure: names present and unique, fields declare at least one value
 2. layout: offsets/sizes non-negative
 3. encoding: type masks meaningful, integer-like widths in {1, 2, 4, 8},
    references and colors fit their slots

Returns a list of ValidationErrorRecord; empty list means success.
"""

from __future__ import annotations
from typing import Iterable, List

from ..encoding import COLOR_SIZE, INTEGER_WIDTHS, REFERENCE_SIZE
from ..errors import (
    E_SCHEMA_DUP,
    E_SCHEMA_EMPTY,
    E_SCHEMA_MASK,
    E_SCHEMA_OFFSET,
    E_SCHEMA_WIDTH,
)
from .models import FieldSchema, SchemaTable, TypeMask, ValueSchema

__all__ = [
    "ValidationErrorRecord",
    "validate_table",
    "validate_tables",
]

_VALUE_KINDS = (
    TypeMask.INTEGER
    | TypeMask.BITMASK
    | TypeMask.STRING
    | TypeMask.COLOR
    | TypeMask.RESOURCE_REFERENCE
)


class ValidationErrorRecord:
    def __init__(self, code: str, message: str, path: str = "") -> None:
        self.code = code
        self.message = message
        self.path = path

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "path": self.path}

    def __repr__(self) -> str:  # convenience for tests
        return f"ValidationErrorRecord(code={self.code}, path={self.path}, message={self.message})"


def _err(
    errors: List[ValidationErrorRecord], code: str, message: str, path: str
):
    errors.append(ValidationErrorRecord(code, message, path))


def _check_value(
    errors: List[ValidationErrorRecord], value: ValueSchema, path: str
) -> None:
    mask = value.type_mask
    if value.offset < 0:
        _err(errors, E_SCHEMA_OFFSET, "Negative offset", path + ".offset")
    if value.size < 0:
        _err(errors, E_SCHEMA_OFFSET, "Negative size", path + ".size")
    if not mask & _VALUE_KINDS:
        _err(errors, E_SCHEMA_MASK, "Value accepts no types", path)
        return
    if mask & TypeMask.FIXED_CSTRING and not mask & TypeMask.STRING:
        _err(
            errors,
            E_SCHEMA_MASK,
            "fixed_cstring flag requires the string type",
            path,
        )
    numeric = bool(mask & (TypeMask.INTEGER | TypeMask.BITMASK))
    if (numeric or value.symbols) and value.size not in INTEGER_WIDTHS:
        _err(
            errors,
            E_SCHEMA_WIDTH,
            f"Integer width {value.size} not in {INTEGER_WIDTHS}",
            path + ".size",
        )
    if mask & TypeMask.RESOURCE_REFERENCE and value.size < REFERENCE_SIZE:
        _err(
            errors,
            E_SCHEMA_WIDTH,
            f"Resource references need {REFERENCE_SIZE} bytes",
            path + ".size",
        )
    if mask & TypeMask.COLOR and value.size < COLOR_SIZE:
        _err(
            errors,
            E_SCHEMA_WIDTH,
            f"Colors need {COLOR_SIZE} bytes",
            path + ".size",
        )


def _check_field(
    errors: List[ValidationErrorRecord], fs: FieldSchema, path: str
) -> None:
    if not fs.name:
        _err(errors, E_SCHEMA_EMPTY, "Missing field name", path)
    if not fs.values:
        _err(errors, E_SCHEMA_EMPTY, "Field declares no values", path)
        return
    seen: set[str] = set()
    for i, value in enumerate(fs.values):
        vpath = f"{path}.values[{i}]"
        if value.name in seen:
            _err(errors, E_SCHEMA_DUP, f"Duplicate value '{value.name}'", vpath)
        seen.add(value.name)
        _check_value(errors, value, vpath)


def validate_table(table: SchemaTable) -> List[ValidationErrorRecord]:
    errors: List[ValidationErrorRecord] = []
    root = table.type_code or "<anonymous>"
    if not table.type_code:
        _err(errors, E_SCHEMA_EMPTY, "Missing type code", root)
    seen: set[str] = set()
    for i, fs in enumerate(table.fields):
        path = f"{root}.fields[{i}]"
        if fs.name in seen:
            _err(errors, E_SCHEMA_DUP, f"Duplicate field '{fs.name}'", path)
        seen.add(fs.name)
        _check_field(errors, fs, path)
    return errors


def validate_tables(
    tables: Iterable[SchemaTable],
) -> List[ValidationErrorRecord]:
    errors: List[ValidationErrorRecord] = []
    codes: set[str] = set()
    for table in tables:
        if table.type_code in codes:
            _err(
                errors,
                E_SCHEMA_DUP,
                f"Duplicate table for type '{table.type_code}'",
                table.type_code,
            )
        codes.add(table.type_code)
        errors.extend(validate_table(table))
    return errors
