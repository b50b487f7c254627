"""Growable, cursor-addressed byte sink for assembled resource records.

The blob only ever grows: ``pad_to_size`` zero-extends and never truncates,
and positioned writes past the current end extend the buffer with zeros
first. Integer writes truncate their argument to the destination width using
two's-complement semantics, so ``write_word(-1)`` and ``write_signed_word(-1)``
both produce ``FF FF``.
"""

from __future__ import annotations

import struct

__all__ = ["Blob", "PSTR_MAX_LENGTH"]

PSTR_MAX_LENGTH = 255

_UNSIGNED_CODES = {1: "B", 2: "H", 4: "I", 8: "Q"}
_SIGNED_CODES = {1: "b", 2: "h", 4: "i", 8: "q"}


def _wrap(value: int, size: int, signed: bool) -> int:
    bits = size * 8
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


class Blob:
    def __init__(
        self,
        data: bytes = b"",
        *,
        byte_order: str = "big",
        encoding: str = "mac_roman",
    ) -> None:
        if byte_order not in ("big", "little"):
            raise ValueError(f"Unknown byte order: {byte_order}")
        self._buf = bytearray(data)
        self._pos = 0
        self._prefix = ">" if byte_order == "big" else "<"
        self.byte_order = byte_order
        self.encoding = encoding

    # Cursor -------------------------------------------------------------------
    def size(self) -> int:
        return len(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def insertion_point(self) -> int:
        return self._pos

    def set_insertion_point(self, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"Negative insertion point: {offset}")
        self._pos = offset

    def pad_to_size(self, size: int) -> None:
        """Zero-extend to at least ``size`` bytes. The cursor is untouched."""
        if size > len(self._buf):
            self._buf.extend(b"\x00" * (size - len(self._buf)))

    def data(self) -> bytes:
        return bytes(self._buf)

    # Raw ----------------------------------------------------------------------
    def write_bytes(self, data: bytes) -> None:
        end = self._pos + len(data)
        self.pad_to_size(end)
        self._buf[self._pos : end] = data
        self._pos = end

    def _write_int(self, value: int, size: int, signed: bool) -> None:
        codes = _SIGNED_CODES if signed else _UNSIGNED_CODES
        self.write_bytes(
            struct.pack(self._prefix + codes[size], _wrap(value, size, signed))
        )

    # Fixed-width integers -----------------------------------------------------
    def write_byte(self, value: int) -> None:
        self._write_int(value, 1, False)

    def write_word(self, value: int) -> None:
        self._write_int(value, 2, False)

    def write_long(self, value: int) -> None:
        self._write_int(value, 4, False)

    def write_quad(self, value: int) -> None:
        self._write_int(value, 8, False)

    def write_signed_byte(self, value: int) -> None:
        self._write_int(value, 1, True)

    def write_signed_word(self, value: int) -> None:
        self._write_int(value, 2, True)

    def write_signed_long(self, value: int) -> None:
        self._write_int(value, 4, True)

    def write_signed_quad(self, value: int) -> None:
        self._write_int(value, 8, True)

    # Strings ------------------------------------------------------------------
    def _encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors="replace")

    def write_cstr(self, text: str, size: int | None = None) -> None:
        """Write a NUL-terminated string.

        With ``size`` the string occupies exactly ``size`` bytes: it is
        truncated to ``size - 1`` bytes so a terminator always remains, and
        the remainder is zero filled.
        """
        raw = self._encode(text)
        if size is None:
            self.write_bytes(raw + b"\x00")
            return
        if size <= 0:
            return
        raw = raw[: size - 1]
        self.write_bytes(raw + b"\x00" * (size - len(raw)))

    def pstr_size(self, text: str) -> int:
        """Bytes :meth:`write_pstr` would emit for ``text``, length byte included."""
        return 1 + len(self._encode(text)[:PSTR_MAX_LENGTH])

    def write_pstr(self, text: str) -> None:
        """Write a length-prefixed string (one length byte, at most 255)."""
        raw = self._encode(text)[:PSTR_MAX_LENGTH]
        self.write_byte(len(raw))
        self.write_bytes(raw)

    def __repr__(self) -> str:  # convenience for tests
        return f"Blob(size={len(self._buf)}, cursor={self._pos})"
