"""Schema table loading (JSON/YAML) for resasm."""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List

from ..errors import load_error
from ..utils.io import read_document
from .defaults import default_from_spec
from .models import (
    FieldSchema,
    SchemaRegistry,
    SchemaTable,
    TypeMask,
    ValueSchema,
    expect,
    named,
)

__all__ = ["load_schemas", "parse_schema_document", "parse_table"]


def load_schemas(path: str | Path) -> SchemaRegistry:
    return parse_schema_document(read_document(path))


def parse_schema_document(data: Dict[str, Any]) -> SchemaRegistry:
    tables = data.get("tables")
    if not isinstance(tables, list):
        raise load_error("'tables' must be a list")
    registry: SchemaRegistry = {}
    for i, entry in enumerate(tables):
        table = parse_table(entry, f"tables[{i}]")
        if table.type_code in registry:
            raise load_error(
                f"Duplicate table for type '{table.type_code}'",
                {"path": f"tables[{i}]"},
            )
        registry[table.type_code] = table
    return registry


def parse_table(entry: Any, path: str = "table") -> SchemaTable:
    if not isinstance(entry, dict):
        raise load_error("Table must be an object", {"path": path})
    type_code = entry.get("type")
    if not isinstance(type_code, str) or not type_code:
        raise load_error("Table is missing its 'type'", {"path": path})
    fields: List[FieldSchema] = []
    for i, f in enumerate(entry.get("fields", []) or []):
        fields.append(_parse_field(f, f"{path}.fields[{i}]"))
    return SchemaTable(type_code=type_code, fields=tuple(fields))


def _parse_field(entry: Any, path: str) -> FieldSchema:
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        raise load_error("Field must be an object with a name", {"path": path})
    values = [
        _parse_value(v, f"{path}.values[{i}]")
        for i, v in enumerate(entry.get("values", []) or [])
    ]
    return (
        named(entry["name"])
        .set_required(bool(entry.get("required", False)))
        .set_deprecated(bool(entry.get("deprecated", False)))
        .set_values(*values)
    )


def _parse_value(entry: Any, path: str) -> ValueSchema:
    if not isinstance(entry, dict):
        raise load_error("Value must be an object", {"path": path})
    types = entry.get("types", [])
    if isinstance(types, str):
        types = [types]
    try:
        mask = TypeMask.parse(types)
        value = expect(
            str(entry.get("name", "")),
            mask,
            int(entry["offset"]),
            int(entry["size"]),
        ).set_signed(bool(entry.get("signed", False)))
        symbols = entry.get("symbols")
        if symbols:
            if not isinstance(symbols, dict):
                raise ValueError("'symbols' must be a mapping")
            value = value.set_symbols(
                {str(k): int(v) for k, v in symbols.items()}
            )
        if "default" in entry and entry["default"] is not None:
            value = value.set_default_value(
                default_from_spec(
                    entry["default"], mask, value.size, value.signed
                )
            )
    except KeyError as e:
        raise load_error(f"Value is missing {e}", {"path": path}) from e
    except (TypeError, ValueError) as e:
        raise load_error(str(e), {"path": path}) from e
    return value
