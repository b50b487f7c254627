"""Literal parsing and fixed-width integer emission shared by all value paths."""

from __future__ import annotations

from .blob import Blob
from .errors import width_error

__all__ = [
    "INTEGER_WIDTHS",
    "REFERENCE_SIZE",
    "COLOR_SIZE",
    "parse_integer",
    "parse_percentage",
    "parse_color",
    "write_integer",
    "write_reference",
    "check_width",
]

INTEGER_WIDTHS = (1, 2, 4, 8)
REFERENCE_SIZE = 2
COLOR_SIZE = 4

_RADIX_PREFIXES = (("0x", 16), ("$", 16), ("#", 16), ("0b", 2), ("0o", 8))
_DIGITS = {
    2: frozenset("01"),
    8: frozenset("01234567"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdef"),
}


def parse_integer(literal: str) -> int:
    """Parse a signed or unsigned integer literal.

    Decimal, ``0x``/``$``/``#`` hexadecimal, ``0b`` binary and ``0o`` octal
    forms are accepted, each with an optional leading sign before the prefix.
    Only ASCII digits of the radix are allowed after it. Raises
    :class:`ValueError` for anything else.
    """
    text = literal.strip().replace("_", "").lower()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    radix = 10
    for prefix, prefix_radix in _RADIX_PREFIXES:
        if text.startswith(prefix):
            text, radix = text[len(prefix) :], prefix_radix
            break
    if not text or not set(text) <= _DIGITS[radix]:
        raise ValueError(f"Invalid integer literal: {literal!r}")
    return sign * int(text, radix)


def parse_percentage(literal: str) -> int:
    text = literal.strip()
    if text.endswith("%"):
        text = text[:-1]
    return parse_integer(text)


def parse_color(literal: str) -> int:
    return parse_integer(literal) & 0xFFFFFFFF


def check_width(size: int, **context) -> None:
    if size not in INTEGER_WIDTHS:
        raise width_error(size, context or None)


def write_integer(blob: Blob, value: int, size: int, signed: bool) -> None:
    """Write ``value`` at the cursor as a ``size``-byte integer.

    The value is truncated to the destination width; signedness only picks
    the writer, never the bytes.
    """
    if size == 1:
        (blob.write_signed_byte if signed else blob.write_byte)(value)
    elif size == 2:
        (blob.write_signed_word if signed else blob.write_word)(value)
    elif size == 4:
        (blob.write_signed_long if signed else blob.write_long)(value)
    elif size == 8:
        (blob.write_signed_quad if signed else blob.write_quad)(value)
    else:
        raise width_error(size)


def write_reference(blob: Blob, resource_id: int) -> int:
    """Write a resource reference (always a signed 16-bit word).

    Returns the id as it was stored.
    """
    blob.write_signed_word(resource_id)
    stored = resource_id & 0xFFFF
    return stored - 0x10000 if stored >= 0x8000 else stored
