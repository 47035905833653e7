"""Row encoding: typed row tuples -> record bytes."""

from typing import List, Optional, Sequence

from wdbx.binary_io import BinaryWriter
from wdbx.bitfield import write_packed
from wdbx.errors import UnsupportedColumnType
from wdbx.models import ColumnType, OffsetEntry, Row, Table
from wdbx.string_table import StringTable


_WRITERS = {
    ColumnType.BOOLEAN: BinaryWriter.write_bool,
    ColumnType.INT8: BinaryWriter.write_int8,
    ColumnType.UINT8: BinaryWriter.write_uint8,
    ColumnType.INT16: BinaryWriter.write_int16,
    ColumnType.UINT16: BinaryWriter.write_uint16,
    ColumnType.INT32: BinaryWriter.write_int32,
    ColumnType.UINT32: BinaryWriter.write_uint32,
    ColumnType.INT64: BinaryWriter.write_int64,
    ColumnType.UINT64: BinaryWriter.write_uint64,
    ColumnType.FLOAT: BinaryWriter.write_float,
}


def encode_rows(
    writer: BinaryWriter,
    table: Table,
    rows: Sequence[Row],
    string_table: Optional[StringTable] = None,
    duplicates: bool = False,
) -> List[OffsetEntry]:
    """Serialise rows in order at the writer's position.

    Auto-generated columns are skipped, as is the id column when the header
    carries an index table. Returns the (offset, length) of every record
    when the header has an offset table, otherwise an empty list.

    Raises:
        UnsupportedColumnType: a column type with no on-disk encoding.
    """
    header = table.header
    stored = header.stored_columns(table)
    inline_strings = header.has_offset_table
    if string_table is None and not inline_strings:
        string_table = StringTable(header.extended_string_table, writer.encoding)

    offset_map: List[OffsetEntry] = []
    last = len(rows) - 1

    for n, row in enumerate(rows):
        start = writer.position

        for i in stored:
            column = table.columns[i]
            value = row[i]

            if column.type is ColumnType.STRING:
                if inline_strings:
                    writer.write_cstring(value)
                else:
                    writer.write_int32(string_table.write(value, duplicates))
                continue

            if column.is_packed:
                write_packed(writer, column, value)
                continue

            write = _WRITERS.get(column.type)
            if write is None:
                raise UnsupportedColumnType(f"Unknown column type {column.type!r} for '{column.name}'")
            write(writer, value)

        header.write_record_padding(writer, table, start, n)

        if header.has_offset_table:
            offset_map.append(OffsetEntry(start, writer.position - start))

            # Without a second index the last record is aligned to 4 bytes
            if header.is_legion_file and not header.has_second_index and n == last:
                writer.pad_to(4)

    return offset_map
