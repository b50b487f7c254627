"""Declarative field/value schema models.

Schemas are frozen configuration: the fluent ``set_*`` methods return new
instances via :func:`dataclasses.replace`, so a table built once at startup
can be shared by any number of assemblies.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import IntFlag
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from ..blob import Blob
from ..resource import ValueType

DefaultWriter = Callable[[Blob], None]

_EMPTY_SYMBOLS: Mapping[str, int] = MappingProxyType({})


class TypeMask(IntFlag):
    NONE = 0
    INTEGER = 1 << 0
    BITMASK = 1 << 1
    STRING = 1 << 2
    COLOR = 1 << 3
    RESOURCE_REFERENCE = 1 << 4
    # Encoding modifier: strings are written as fixed-width C strings.
    FIXED_CSTRING = 1 << 5

    @classmethod
    def parse(cls, names: Iterable[str]) -> "TypeMask":
        mask = cls.NONE
        for name in names:
            key = name.strip().upper().replace("-", "_")
            if key not in cls.__members__:
                raise ValueError(f"Unknown type mask flag: {name!r}")
            mask |= cls[key]
        return mask


@dataclass(frozen=True, slots=True)
class ValueSchema:
    name: str
    type_mask: TypeMask
    offset: int
    size: int
    signed: bool = False
    symbols: Mapping[str, int] = field(default_factory=lambda: _EMPTY_SYMBOLS)
    default: Optional[DefaultWriter] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.symbols, MappingProxyType):
            object.__setattr__(self, "symbols", MappingProxyType(dict(self.symbols)))

    def set_symbols(self, symbols: Mapping[str, int]) -> "ValueSchema":
        return replace(self, symbols=MappingProxyType(dict(symbols)))

    def set_default_value(self, writer: Optional[DefaultWriter]) -> "ValueSchema":
        return replace(self, default=writer)

    def set_signed(self, signed: bool = True) -> "ValueSchema":
        return replace(self, signed=signed)

    @property
    def end(self) -> int:
        return self.offset + self.size

    @property
    def fixed_cstring(self) -> bool:
        return bool(self.type_mask & TypeMask.FIXED_CSTRING)

    def lookup_symbol(self, text: str) -> Optional[int]:
        for symbol, value in self.symbols.items():
            if symbol == text:
                return value
        return None

    def type_allowed(self, value_type: ValueType) -> bool:
        mask = self.type_mask
        if value_type in (ValueType.RESOURCE_ID, ValueType.FILE_REFERENCE):
            return bool(mask & TypeMask.RESOURCE_REFERENCE)
        if value_type is ValueType.IDENTIFIER:
            # Symbol tables turn identifiers into symbolic resource references.
            if self.symbols:
                return bool(mask & TypeMask.RESOURCE_REFERENCE)
            return bool(mask & (TypeMask.INTEGER | TypeMask.BITMASK))
        if value_type is ValueType.INTEGER:
            return bool(mask & (TypeMask.INTEGER | TypeMask.BITMASK))
        if value_type is ValueType.PERCENTAGE:
            return bool(mask & TypeMask.INTEGER)
        if value_type is ValueType.STRING:
            return bool(mask & TypeMask.STRING)
        if value_type is ValueType.COLOR:
            return bool(mask & TypeMask.COLOR)
        return False

    def write_default_value(self, blob: Blob) -> None:
        if self.default is None:
            return
        blob.set_insertion_point(self.offset)
        self.default(blob)


def expect(
    name: str, type_mask: TypeMask, offset: int, size: int
) -> ValueSchema:
    return ValueSchema(name=name, type_mask=type_mask, offset=offset, size=size)


@dataclass(frozen=True, slots=True)
class FieldSchema:
    name: str
    required: bool = False
    deprecated: bool = False
    values: Tuple[ValueSchema, ...] = ()

    def set_required(self, required: bool = True) -> "FieldSchema":
        return replace(self, required=required)

    def set_deprecated(self, deprecated: bool = True) -> "FieldSchema":
        return replace(self, deprecated=deprecated)

    def set_values(self, *values: ValueSchema) -> "FieldSchema":
        return replace(self, values=tuple(values))

    def required_data_size(self) -> int:
        return max((v.end for v in self.values), default=0)

    def offset(self) -> int:
        return self.values[0].offset

    def __len__(self) -> int:
        return len(self.values)


def named(name: str) -> FieldSchema:
    return FieldSchema(name=name)


@dataclass(frozen=True, slots=True)
class SchemaTable:
    """All field schemas for one resource kind, in declaration order."""

    type_code: str
    fields: Tuple[FieldSchema, ...] = ()

    def __iter__(self) -> Iterator[FieldSchema]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def field_named(self, name: str) -> Optional[FieldSchema]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def required_data_size(self) -> int:
        return max((f.required_data_size() for f in self.fields), default=0)


def schema_table(type_code: str, *fields: FieldSchema) -> SchemaTable:
    return SchemaTable(type_code=type_code, fields=tuple(fields))


SchemaRegistry = Dict[str, SchemaTable]


__all__ = [
    "DefaultWriter",
    "TypeMask",
    "ValueSchema",
    "FieldSchema",
    "SchemaTable",
    "SchemaRegistry",
    "expect",
    "named",
    "schema_table",
]
