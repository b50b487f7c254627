from __future__ import annotations

import pytest

from resasm.blob import Blob


def test_pad_extends_with_zeros_and_keeps_cursor():
    blob = Blob()
    blob.write_word(0x1234)
    blob.pad_to_size(6)
    assert blob.data() == b"\x12\x34\x00\x00\x00\x00"
    assert blob.insertion_point == 2


def test_pad_never_truncates_or_moves_cursor():
    blob = Blob(b"\xAA\xBB\xCC\xDD")
    blob.set_insertion_point(1)
    blob.pad_to_size(2)
    blob.pad_to_size(4)
    assert blob.data() == b"\xAA\xBB\xCC\xDD"
    assert blob.insertion_point == 1


def test_positioned_write_overwrites_in_place():
    blob = Blob()
    blob.pad_to_size(8)
    blob.set_insertion_point(4)
    blob.write_long(0xDEADBEEF)
    blob.set_insertion_point(0)
    blob.write_byte(7)
    assert blob.data() == b"\x07\x00\x00\x00\xDE\xAD\xBE\xEF"


def test_write_past_end_zero_extends():
    blob = Blob()
    blob.set_insertion_point(3)
    blob.write_byte(1)
    assert blob.data() == b"\x00\x00\x00\x01"


def test_integer_writes_truncate_twos_complement():
    blob = Blob()
    blob.write_word(-1)
    blob.write_signed_word(-2)
    blob.write_byte(0x1FF)
    blob.write_signed_byte(200)
    assert blob.data() == b"\xFF\xFF\xFF\xFE\xFF\xC8"


def test_quad_and_little_endian():
    blob = Blob(byte_order="little")
    blob.write_quad(1)
    blob.write_signed_long(-1)
    assert blob.data() == b"\x01" + b"\x00" * 7 + b"\xFF" * 4


def test_unknown_byte_order_rejected():
    with pytest.raises(ValueError):
        Blob(byte_order="middle")


def test_fixed_cstr_pads_and_truncates():
    blob = Blob()
    blob.write_cstr("Hi", 8)
    assert blob.data() == b"Hi" + b"\x00" * 6
    blob = Blob()
    blob.write_cstr("Overflow", 4)
    assert blob.data() == b"Ove\x00"


def test_unbounded_cstr_is_nul_terminated():
    blob = Blob()
    blob.write_cstr("ab")
    assert blob.data() == b"ab\x00"


def test_pstr_length_prefix_and_limit():
    blob = Blob()
    blob.write_pstr("Hi")
    assert blob.data() == b"\x02Hi"
    blob = Blob()
    blob.write_pstr("x" * 300)
    assert blob.data()[0] == 255
    assert len(blob) == 256


def test_mac_roman_encoding():
    blob = Blob()
    blob.write_pstr("é")
    assert blob.data() == b"\x01\x8e"
