"""Default value generators for omitted optional fields.

Each factory returns a callable that writes at the blob's current cursor;
:meth:`ValueSchema.write_default_value` positions the cursor first.
"""

from __future__ import annotations

from typing import Any, Dict

from ..blob import Blob
from ..encoding import COLOR_SIZE, check_width, write_integer, write_reference
from .models import DefaultWriter, TypeMask

__all__ = [
    "integer_default",
    "resource_reference_default",
    "color_default",
    "cstr_default",
    "pstr_default",
    "default_from_spec",
]


def integer_default(value: int, size: int, signed: bool = False) -> DefaultWriter:
    check_width(size)

    def _write(blob: Blob) -> None:
        write_integer(blob, value, size, signed)

    return _write


def resource_reference_default(resource_id: int) -> DefaultWriter:
    def _write(blob: Blob) -> None:
        write_reference(blob, resource_id)

    return _write


def color_default(rgba: int) -> DefaultWriter:
    return integer_default(rgba & 0xFFFFFFFF, COLOR_SIZE)


def cstr_default(text: str, size: int) -> DefaultWriter:
    def _write(blob: Blob) -> None:
        blob.write_cstr(text, size)

    return _write


def pstr_default(text: str) -> DefaultWriter:
    def _write(blob: Blob) -> None:
        blob.write_pstr(text)

    return _write


def default_from_spec(
    value: Any, type_mask: TypeMask, size: int, signed: bool = False
) -> DefaultWriter:
    """Build a generator from a literal ``default`` entry in a schema document.

    Strings follow the slot's string mode; integers are written as resource
    references when the slot only accepts references, as colors when it only
    accepts colors, and as plain integers otherwise.
    """
    if isinstance(value, dict):
        return _default_from_mapping(value, size, signed)
    if isinstance(value, str):
        if type_mask & TypeMask.FIXED_CSTRING:
            return cstr_default(value, size)
        return pstr_default(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Unsupported default value: {value!r}")
    numeric = TypeMask.INTEGER | TypeMask.BITMASK
    if type_mask & TypeMask.RESOURCE_REFERENCE and not type_mask & numeric:
        return resource_reference_default(value)
    if type_mask & TypeMask.COLOR and not type_mask & numeric:
        return color_default(value)
    return integer_default(value, size, signed)


def _default_from_mapping(
    entry: Dict[str, Any], size: int, signed: bool
) -> DefaultWriter:
    kind = entry.get("kind", "integer")
    value = entry.get("value", 0)
    if kind == "integer":
        return integer_default(int(value), int(entry.get("size", size)), signed)
    if kind == "reference":
        return resource_reference_default(int(value))
    if kind == "color":
        return color_default(int(value))
    if kind == "cstr":
        return cstr_default(str(value), int(entry.get("size", size)))
    if kind == "pstr":
        return pstr_default(str(value))
    raise ValueError(f"Unknown default kind: {kind!r}")
