"""Raw resource field model, as produced by the upstream parser."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class ValueType(Enum):
    INTEGER = "integer"
    PERCENTAGE = "percentage"
    RESOURCE_ID = "resource_id"
    STRING = "string"
    IDENTIFIER = "identifier"
    FILE_REFERENCE = "file_reference"
    COLOR = "color"

    @classmethod
    def parse(cls, text: str) -> "ValueType":
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown value type: {text!r}") from None


FieldValue = Tuple[str, ValueType]


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    values: Tuple[FieldValue, ...] = ()
    line: int = 0

    @classmethod
    def of(
        cls, name: str, *values: FieldValue, line: int = 0
    ) -> "Field":
        return cls(name, tuple(values), line)

    def __len__(self) -> int:
        return len(self.values)


@dataclass(slots=True)
class Resource:
    type_code: str
    id: int
    name: str = ""
    fields: List[Field] = field(default_factory=list)

    def add_field(self, f: Field) -> None:
        self.fields.append(f)

    def extend(self, fields: Iterable[Field]) -> None:
        self.fields.extend(fields)

    def field_named(self, name: str) -> Optional[Field]:
        # First match wins; names are not required to be unique.
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def describe(self) -> str:
        label = f"'{self.type_code}' #{self.id}"
        if self.name:
            label += f" ({self.name})"
        return label


__all__ = ["ValueType", "FieldValue", "Field", "Resource"]
