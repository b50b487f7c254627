"""Schema-driven field assembler.

One :class:`Assembler` owns one :class:`Blob` and assembles one resource. For
every declared field schema it pads the blob to the field's extent, validates
the resource's raw values against the slots and writes each value at its
absolute offset. Slots that cannot be encoded (missing field, wrong arity,
wrong type, unknown symbol, unresolved file) fall back to their default
generator or stay zero filled, so the record always has its full fixed size.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from ..blob import Blob
from ..encoding import (
    REFERENCE_SIZE,
    check_width,
    parse_color,
    parse_integer,
    parse_percentage,
    write_integer,
    write_reference,
    COLOR_SIZE,
)
from ..errors import (
    E_BAD_LITERAL,
    E_FIELD_ARITY,
    E_STRING_LENGTH,
    E_MISSING_FIELD,
    E_UNKNOWN_SYMBOL,
    E_UNSUPPORTED_VALUE,
    E_VALUE_TYPE,
    W_DEPRECATED_FIELD,
)
from ..logging import get_logger
from ..resource import Field, Resource, ValueType
from ..schema.defaults import integer_default, resource_reference_default
from ..schema.models import FieldSchema, TypeMask, ValueSchema, expect, named
from .diagnostics import Diagnostic, DiagnosticLog, ErrorPolicy

__all__ = [
    "FileReferenceResolver",
    "AssembleOptions",
    "AssemblyResult",
    "Assembler",
    "assemble",
]

FileReferenceResolver = Callable[[str], Optional[int]]

logger = get_logger("assembler")


@dataclass(slots=True)
class AssembleOptions:
    byte_order: str = "big"
    string_encoding: str = "mac_roman"
    policy: ErrorPolicy = ErrorPolicy.CONTINUE
    # Maps a file reference literal to a resource id; None leaves them unsupported.
    resolver: Optional[FileReferenceResolver] = None


@dataclass(slots=True)
class AssemblyResult:
    resource: Resource
    data: bytes
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def __len__(self) -> int:
        return len(self.data)


class Assembler:
    def __init__(
        self,
        resource: Resource,
        options: AssembleOptions | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.resource = resource
        self.options = options or AssembleOptions()
        self.diagnostics = diagnostics or DiagnosticLog(self.options.policy)
        self.blob = Blob(
            byte_order=self.options.byte_order,
            encoding=self.options.string_encoding,
        )
        self._context = resource.describe()

    # Assembly -----------------------------------------------------------------
    def assemble(self, fields: Iterable[FieldSchema]) -> AssemblyResult:
        for fs in fields:
            self.assemble_field(fs)
        return self.result()

    def result(self) -> AssemblyResult:
        return AssemblyResult(
            resource=self.resource,
            data=self.blob.data(),
            diagnostics=list(self.diagnostics.records),
        )

    # Field functions ----------------------------------------------------------
    def find_field(self, name: str, required: bool) -> Optional[Field]:
        found = self.resource.field_named(name)
        if found is None and required:
            self.diagnostics.error(
                self._context,
                0,
                f"Missing field '{name}' in resource.",
                code=E_MISSING_FIELD,
                field=name,
            )
        return found

    def assemble_field(self, fs: FieldSchema) -> Optional[Field]:
        """Assemble one schema field; returns the raw field when present."""
        raw = self.find_field(fs.name, fs.required)
        if raw is not None and fs.deprecated:
            self.diagnostics.warning(
                self._context,
                raw.line,
                f"The '{fs.name}' field is deprecated.",
                code=W_DEPRECATED_FIELD,
                field=fs.name,
            )

        # Grow first so positioned writes never land beyond the end.
        self.blob.pad_to_size(fs.required_data_size())

        if raw is None:
            self._write_defaults(fs.values)
            return None

        if len(raw.values) != len(fs.values):
            self.diagnostics.error(
                self._context,
                raw.line,
                f"The '{fs.name}' field expects {len(fs.values)} values, "
                f"{len(raw.values)} provided.",
                code=E_FIELD_ARITY,
                field=fs.name,
            )
            self._write_defaults(fs.values)
            return raw

        for index, (slot, (literal, value_type)) in enumerate(
            zip(fs.values, raw.values)
        ):
            if not slot.type_allowed(value_type):
                self._value_error(
                    raw,
                    index,
                    f"The '{fs.name}' field value {index} ('{slot.name}') "
                    f"does not accept a {value_type.value} value.",
                    E_VALUE_TYPE,
                )
                slot.write_default_value(self.blob)
                continue
            if not self._encode_value(raw, index, slot, literal, value_type):
                slot.write_default_value(self.blob)
        logger.debug(
            "%s: assembled '%s' (%d values)",
            self._context,
            fs.name,
            len(fs.values),
        )
        return raw

    def _write_defaults(self, slots: Iterable[ValueSchema]) -> None:
        for slot in slots:
            slot.write_default_value(self.blob)

    def _value_error(self, raw: Field, index: int, message: str, code: str):
        self.diagnostics.error(
            self._context,
            raw.line,
            message,
            code=code,
            field=raw.name,
            value_index=index,
        )

    # Encoding -----------------------------------------------------------------
    def _encode_value(
        self,
        raw: Field,
        index: int,
        slot: ValueSchema,
        literal: str,
        value_type: ValueType,
    ) -> bool:
        blob = self.blob
        if value_type in (ValueType.INTEGER, ValueType.PERCENTAGE):
            check_width(slot.size, field=raw.name, value=slot.name)
            parse = (
                parse_percentage
                if value_type is ValueType.PERCENTAGE
                else parse_integer
            )
            number = self._parse(raw, index, literal, parse)
            if number is None:
                return False
            blob.set_insertion_point(slot.offset)
            write_integer(blob, number, slot.size, slot.signed)
            return True

        if value_type is ValueType.RESOURCE_ID:
            number = self._parse(raw, index, literal, parse_integer)
            if number is None:
                return False
            blob.set_insertion_point(slot.offset)
            write_reference(blob, number)
            return True

        if value_type is ValueType.STRING:
            if slot.fixed_cstring:
                blob.set_insertion_point(slot.offset)
                blob.write_cstr(literal, slot.size)
                return True
            needed = blob.pstr_size(literal)
            if needed > slot.size:
                # Writing it would spill into the following slots.
                self._value_error(
                    raw,
                    index,
                    f"String of {needed} bytes does not fit the {slot.size}-byte "
                    f"'{raw.name}' field value {index} ('{slot.name}').",
                    E_STRING_LENGTH,
                )
                return False
            blob.set_insertion_point(slot.offset)
            blob.write_pstr(literal)
            return True

        if value_type is ValueType.IDENTIFIER:
            check_width(slot.size, field=raw.name, value=slot.name)
            number = slot.lookup_symbol(literal)
            if number is None:
                self._value_error(
                    raw,
                    index,
                    f"Unrecognised symbol '{literal}' for the '{raw.name}' "
                    f"field value {index} ('{slot.name}').",
                    E_UNKNOWN_SYMBOL,
                )
                return False
            blob.set_insertion_point(slot.offset)
            write_integer(blob, number, slot.size, slot.signed)
            return True

        if value_type is ValueType.FILE_REFERENCE:
            resolver = self.options.resolver
            resolved = resolver(literal) if resolver is not None else None
            if resolved is None:
                reason = (
                    "could not be resolved"
                    if resolver is not None
                    else "are not supported without a file resolver"
                )
                self._value_error(
                    raw,
                    index,
                    f"File references {reason}: '{literal}' in the "
                    f"'{raw.name}' field.",
                    E_UNSUPPORTED_VALUE,
                )
                return False
            blob.set_insertion_point(slot.offset)
            write_reference(blob, resolved)
            return True

        if value_type is ValueType.COLOR:
            number = self._parse(raw, index, literal, parse_color)
            if number is None:
                return False
            blob.set_insertion_point(slot.offset)
            write_integer(blob, number, COLOR_SIZE, False)
            return True

        self._value_error(  # pragma: no cover
            raw,
            index,
            f"Unsupported value kind {value_type!r}.",
            E_UNSUPPORTED_VALUE,
        )
        return False  # pragma: no cover

    def _parse(
        self,
        raw: Field,
        index: int,
        literal: str,
        parse: Callable[[str], int],
    ) -> Optional[int]:
        try:
            return parse(literal)
        except ValueError:
            self._value_error(
                raw,
                index,
                f"Invalid numeric literal '{literal}' in the '{raw.name}' "
                f"field value {index}.",
                E_BAD_LITERAL,
            )
            return None

    # Typed fields -------------------------------------------------------------
    def _read_signed_word(self, offset: int) -> int:
        chunk = self.blob.data()[offset : offset + 2]
        return int.from_bytes(chunk, self.blob.byte_order, signed=True)

    def integer_field(
        self,
        name: str,
        offset: int,
        count: int = 1,
        size: int = 2,
        default: int = 0,
        required: bool = False,
        signed: bool = True,
    ) -> Optional[Field]:
        """``count`` consecutive integers of ``size`` bytes from ``offset``."""
        slots = [
            expect(f"{name}[{i}]", TypeMask.INTEGER, offset + i * size, size)
            .set_signed(signed)
            .set_default_value(integer_default(default, size, signed))
            for i in range(count)
        ]
        fs = named(name).set_required(required).set_values(*slots)
        return self.assemble_field(fs)

    def resource_reference_field(
        self,
        name: str,
        offset: int,
        default: int = 0,
        required: bool = False,
    ) -> int:
        """Single resource reference; returns the id stored in the record."""
        slot = expect(
            name, TypeMask.RESOURCE_REFERENCE, offset, REFERENCE_SIZE
        ).set_default_value(resource_reference_default(default))
        fs = named(name).set_required(required).set_values(slot)
        self.assemble_field(fs)
        return self._read_signed_word(offset)

    def size_field(
        self,
        name: str,
        offset: int,
        default: Tuple[int, int] = (0, 0),
        required: bool = False,
    ) -> Tuple[int, int]:
        """Width/height pair of signed words; returns the stored pair."""
        width, height = default
        fs = (
            named(name)
            .set_required(required)
            .set_values(
                expect("width", TypeMask.INTEGER, offset, 2)
                .set_signed()
                .set_default_value(integer_default(width, 2, True)),
                expect("height", TypeMask.INTEGER, offset + 2, 2)
                .set_signed()
                .set_default_value(integer_default(height, 2, True)),
            )
        )
        self.assemble_field(fs)
        return (
            self._read_signed_word(offset),
            self._read_signed_word(offset + 2),
        )


def assemble(
    resource: Resource,
    fields: Iterable[FieldSchema],
    options: AssembleOptions | None = None,
    diagnostics: DiagnosticLog | None = None,
) -> AssemblyResult:
    return Assembler(resource, options, diagnostics).assemble(fields)
