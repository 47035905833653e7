"""Tests for bit-packed integer fields."""

import os
import sys

import pytest

# Add src to path so we can import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.bitfield import byte_count, decode_bits, encode_bits, read_packed, write_packed
from wdbx.models import ColumnDescriptor, ColumnType


def test_byte_count():
    assert byte_count(24, 32) == 3
    assert byte_count(1, 32) == 1
    assert byte_count(17, 32) == 3
    assert byte_count(None, 64) == 8
    assert byte_count(32, 32) == 4


def test_signed_sign_extension():
    """The top packed bit is copied into the high bits."""
    assert decode_bits(0b111, 3, 32, signed=True) == -1
    assert decode_bits(0b011, 3, 32, signed=True) == 3
    assert decode_bits(0b100, 3, 32, signed=True) == -4
    assert decode_bits(0x800000, 24, 32, signed=True) == -(1 << 23)


def test_unsigned_masks_only():
    assert decode_bits(0xFFFFFF, 24, 32, signed=False) == 0xFFFFFF
    assert decode_bits(0x1FFFFFF, 24, 32, signed=False) == 0xFFFFFF


def test_native_width_passthrough():
    assert decode_bits(-5, None, 32, signed=True) == -5
    assert decode_bits(123, 32, 32, signed=True) == 123
    assert encode_bits(-5, None, 32) == -5


def test_encode_truncates_out_of_range():
    """Values wider than the field keep only their low bits."""
    assert encode_bits(0x1FFFFFF, 24, 32) == 0xFFFFFF
    assert encode_bits(-1, 24, 32) == 0xFFFFFF
    assert encode_bits(256, 8, 32) == 0


@pytest.mark.parametrize("bits", [1, 7, 12, 17, 24, 31])
def test_decode_encode_inverse(bits):
    """decode(encode(v)) == v for every value representable in `bits`."""
    for value in (0, 1, (1 << bits) - 1, (1 << (bits - 1))):
        assert decode_bits(encode_bits(value, bits, 32), bits, 32, signed=False) == value

    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    for value in (low, -1 if bits > 1 else low, 0, high):
        assert decode_bits(encode_bits(value, bits, 32), bits, 32, signed=True) == value


def test_write_read_packed_column():
    column = ColumnDescriptor("Delta", ColumnType.INT32, bits=24)
    writer = BinaryWriter()
    write_packed(writer, column, -2)
    assert writer.getvalue() == b"\xfe\xff\xff"

    reader = BinaryReader(writer.getvalue())
    assert read_packed(reader, column) == -2
    assert reader.position == 3


def test_packed_64bit_column():
    column = ColumnDescriptor("Mask", ColumnType.UINT64, bits=40)
    writer = BinaryWriter()
    write_packed(writer, column, 0x123456789A)
    assert writer.getvalue() == b"\x9a\x78\x56\x34\x12"
    assert read_packed(BinaryReader(writer.getvalue()), column) == 0x123456789A


def test_packed_small_native_type():
    column = ColumnDescriptor("Nibble", ColumnType.INT8, bits=4)
    assert column.byte_size == 1
    assert read_packed(BinaryReader(b"\x0f"), column) == -1
    assert read_packed(BinaryReader(b"\x07"), column) == 7


def test_column_bits_validation():
    """Only integer columns take a bit width, and it must fit the type."""
    with pytest.raises(ValueError):
        ColumnDescriptor("Name", ColumnType.STRING, bits=8)
    with pytest.raises(ValueError):
        ColumnDescriptor("ID", ColumnType.INT32, bits=33)
    with pytest.raises(ValueError):
        ColumnDescriptor("ID", ColumnType.INT32, bits=0)

    # Native width is the same as unpacked
    assert ColumnDescriptor("ID", ColumnType.INT32, bits=32).is_packed is False
