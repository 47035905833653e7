"""Byte-level builders for hand-made table files used across the tests."""

import os
import struct
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from wdbx.definitions import DefinitionRegistry
from wdbx.models import ColumnDescriptor, ColumnType


# ---------------------------------------------------------------------------
# Column schemas
# ---------------------------------------------------------------------------

def zone_columns():
    """ID, Name, Level, Scale: 14 bytes per record when unpacked."""
    return [
        ColumnDescriptor("ID", ColumnType.INT32),
        ColumnDescriptor("Name", ColumnType.STRING),
        ColumnDescriptor("Level", ColumnType.UINT16),
        ColumnDescriptor("Scale", ColumnType.FLOAT),
    ]


def area_columns():
    """ID, Name, Value: 10 bytes per record when unpacked."""
    return [
        ColumnDescriptor("ID", ColumnType.INT32),
        ColumnDescriptor("Name", ColumnType.STRING),
        ColumnDescriptor("Value", ColumnType.UINT16),
    ]


def registry_for(name, columns):
    registry = DefinitionRegistry()
    registry.register(name, columns)
    return registry


# ---------------------------------------------------------------------------
# File builders
# ---------------------------------------------------------------------------

def wdbc_file(records, record_size, strings=b"\x00", field_count=0, signature=b"WDBC",
              record_count=None):
    """Header + records (zero-padded to record_size) + string block."""
    if record_count is None:
        record_count = len(records)
    header = signature + struct.pack("<4I", record_count, field_count, record_size, len(strings))
    body = b"".join(r.ljust(record_size, b"\x00") for r in records)
    return header + body + strings


def wdb2_file(records, record_size, strings=b"\x00", field_count=0, build=0,
              min_id=0, max_id=0, id_lookup=b""):
    header = b"WDB2" + struct.pack("<4I", len(records), field_count, record_size, len(strings))
    header += struct.pack("<3I4i", 0, build, 0, min_id, max_id, 0, 0)
    body = b"".join(r.ljust(record_size, b"\x00") for r in records)
    return header + id_lookup + body + strings


def wdb5_header(record_count, field_count, record_size, string_block_size,
                min_id=0, max_id=0, copy_table_size=0, flags=0, id_index=0,
                field_structure=()):
    """48-byte WDB5 header followed by the (bits, offset) field structure."""
    header = b"WDB5" + struct.pack(
        "<4I", record_count, field_count, record_size, string_block_size
    )
    header += struct.pack("<2I4i", 0, 0, min_id, max_id, 0, copy_table_size)
    header += struct.pack("<2H", flags, id_index)
    for bits, offset in field_structure:
        header += struct.pack("<hH", bits, offset)
    return header
