"""Tests for header detection and per-variant header parsing."""

import os
import struct
import sys

import pytest

# Add src to path so we can import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.errors import EmptyFile, InvalidFile, TruncatedDataError, UnknownFormat
from wdbx.headers import (
    FieldStructureEntry,
    FormatVariant,
    WDB2Header,
    WDB5Header,
    WDBCHeader,
    create_header,
    extract_header,
)
from wdbx.models import Table

from table_builders import area_columns, wdb2_file, wdb5_header, wdbc_file


# ---------------------------------------------------------------------------
# Signature detection
# ---------------------------------------------------------------------------

def test_wdbc_header():
    data = wdbc_file([b"\x01\x00\x00\x00"], 4, field_count=1)
    reader = BinaryReader(data)
    header = extract_header(reader)

    assert isinstance(header, WDBCHeader)
    assert header.variant is FormatVariant.WDBC
    assert header.record_count == 1
    assert header.field_count == 1
    assert header.record_size == 4
    assert header.string_block_size == 1
    assert reader.position == 20


def test_reversed_signature():
    """A signature stored back to front is recognised and remembered."""
    data = wdbc_file([b"\x01\x00\x00\x00"], 4, signature=b"CBDW")
    header = extract_header(BinaryReader(data))
    assert header.variant is FormatVariant.WDBC
    assert header.signature == "WDBC"
    assert header.reversed_signature is True


def test_wch2_is_wdb2():
    data = b"WCH2" + wdb2_file([b"\x00" * 4], 4)[4:]
    header = extract_header(BinaryReader(data))
    assert isinstance(header, WDB2Header)
    assert header.signature == "WCH2"


@pytest.mark.parametrize("signature", [b"VOMN", b"\x00\x00\x00\x00", b"    ", b"WDB9"])
def test_unknown_signature(signature):
    data = signature + struct.pack("<4I", 1, 1, 4, 1)
    with pytest.raises(UnknownFormat):
        extract_header(BinaryReader(data))


def test_zero_records_is_invalid():
    data = b"WDBC" + struct.pack("<4I", 0, 1, 4, 1) + b"\x00"
    with pytest.raises(InvalidFile) as excinfo:
        extract_header(BinaryReader(data))
    assert isinstance(excinfo.value, EmptyFile)
    assert "File contains no records" in str(excinfo.value)


def test_zero_record_size_is_invalid():
    data = b"WDBC" + struct.pack("<4I", 3, 1, 0, 1) + b"\x00"
    with pytest.raises(EmptyFile):
        extract_header(BinaryReader(data))


def test_truncated_header():
    with pytest.raises(TruncatedDataError):
        extract_header(BinaryReader(b"WDBC\x01\x00"))


# ---------------------------------------------------------------------------
# WDB2
# ---------------------------------------------------------------------------

def test_wdb2_fields():
    data = wdb2_file([b"\x00" * 8], 8, build=12340)
    reader = BinaryReader(data)
    header = extract_header(reader)
    assert header.build == 12340
    assert header.max_id == 0
    assert reader.position == 48
    assert header.extended_string_table is False


def test_wdb2_skips_id_lookup_block():
    """max_id != 0 is followed by (max - min + 1) x (u32 + u16) bytes."""
    lookup = struct.pack("<3I", 0, 0, 1) + struct.pack("<3H", 0, 0, 0)
    data = wdb2_file([b"\x00" * 4, b"\x00" * 4], 4, min_id=5, max_id=7, id_lookup=lookup)
    reader = BinaryReader(data)
    header = extract_header(reader)
    assert reader.position == 48 + 18
    assert header.extended_string_table is True
    assert header.allows_duplicate_strings is True


# ---------------------------------------------------------------------------
# WDB5
# ---------------------------------------------------------------------------

def test_wdb5_fields_and_structure():
    data = wdb5_header(
        record_count=2, field_count=3, record_size=10, string_block_size=5,
        min_id=1, max_id=2, flags=0x05, id_index=0,
        field_structure=[(0, 0), (0, 4), (16, 8)],
    )
    reader = BinaryReader(data)
    header = extract_header(reader)

    assert isinstance(header, WDB5Header)
    assert header.has_offset_table is True
    assert header.has_index_table is True
    assert header.has_second_index is False
    assert header.is_legion_file is True
    assert reader.position == 48 + 12
    assert [e.byte_count for e in header.field_structure] == [4, 4, 2]
    assert header.field_structure[2].offset == 8


def test_short_wdb5_header():
    """Data ending inside the 48-byte WDB5 header is truncated."""
    data = b"WDB5" + struct.pack("<4I", 1, 1, 4, 0)
    with pytest.raises(TruncatedDataError) as excinfo:
        extract_header(BinaryReader(data))
    assert excinfo.value.length == 48
    assert excinfo.value.limit == 20


def test_field_structure_entry():
    assert FieldStructureEntry(bits=8, offset=0).byte_count == 3
    assert FieldStructureEntry(bits=-32, offset=0).byte_count == 8
    assert FieldStructureEntry.for_size(2, 6) == FieldStructureEntry(bits=16, offset=6)


def test_wdb5_generated_field_structure_skips_index_column():
    header = create_header(FormatVariant.WDB5, flags=0x04)
    table = Table("Area", header, area_columns(), [(1, "a", 2)])
    assert header.stored_columns(table) == [1, 2]
    assert header.output_field_structure(table) == [
        FieldStructureEntry(bits=0, offset=0),
        FieldStructureEntry(bits=16, offset=4),
    ]
    assert header.output_record_size(table) == 6


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def test_write_header_placeholder():
    """The string block size is left as 0 for the codec to patch."""
    header = create_header(FormatVariant.WDBC)
    table = Table("Area", header, area_columns(), [(1, "a", 2), (2, "b", 3)])
    writer = BinaryWriter()
    header.write_header(writer, table, table.rows)

    data = writer.getvalue()
    assert data[:4] == b"WDBC"
    assert struct.unpack("<4I", data[4:20]) == (2, 3, 10, 0)


def test_write_reversed_signature():
    header = WDBCHeader(signature="WDBC", reversed_signature=True)
    table = Table("Area", header, area_columns(), [(1, "a", 2)])
    writer = BinaryWriter()
    header.write_header(writer, table, table.rows)
    assert writer.getvalue()[:4] == b"CBDW"
