"""Tests for the little-endian reader/writer cursors."""

import os
import struct
import sys

import pytest

# Add src to path so we can import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.errors import TruncatedDataError


def test_typed_reads():
    data = struct.pack("<bhiIqf", -1, -2, -3, 4, -5, 1.5) + b"Gnomeregan\x00"
    reader = BinaryReader(data)
    assert reader.read_int8() == -1
    assert reader.read_int16() == -2
    assert reader.read_int32() == -3
    assert reader.read_uint32() == 4
    assert reader.read_int64() == -5
    assert reader.read_float() == 1.5
    assert reader.read_cstring() == "Gnomeregan"
    assert reader.remaining == 0


def test_read_past_end():
    reader = BinaryReader(b"\x01\x02")
    with pytest.raises(TruncatedDataError) as excinfo:
        reader.read_int32()
    assert excinfo.value.offset == 0
    assert excinfo.value.limit == 2

    with pytest.raises(TruncatedDataError):
        reader.seek(3)


def test_unterminated_string():
    with pytest.raises(TruncatedDataError):
        BinaryReader(b"Azeroth").read_cstring()


def test_patch_returns_to_position():
    writer = BinaryWriter()
    writer.write_uint32(0)
    writer.write_bytes(b"abcd")
    writer.patch_int32(0, 42)
    assert writer.position == 8
    assert writer.getvalue() == struct.pack("<i", 42) + b"abcd"


def test_pad_and_seek_zero_fill():
    writer = BinaryWriter()
    writer.write_uint8(1)
    writer.pad_to(4)
    assert writer.getvalue() == b"\x01\x00\x00\x00"

    writer.pad_to(4)
    assert writer.length == 4

    writer.seek(6)
    assert writer.getvalue() == b"\x01" + b"\x00" * 5


def test_write_cstring():
    writer = BinaryWriter()
    writer.write_cstring("Kalimdor")
    writer.write_cstring(None)
    assert writer.getvalue() == b"Kalimdor\x00\x00"
