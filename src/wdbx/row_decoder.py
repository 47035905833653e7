"""Row decoding: record bytes -> typed row tuples."""

from typing import List, Optional, Sequence, Tuple

from wdbx.binary_io import BinaryReader
from wdbx.bitfield import read_packed
from wdbx.constants import STRING_NOT_FOUND
from wdbx.errors import SchemaOverflow, TruncatedDataError
from wdbx.layout import RecordLayout, record_length
from wdbx.models import ColumnDescriptor, ColumnType, Row, StringResolutionWarning
from wdbx.string_table import StringTable


_READERS = {
    ColumnType.BOOLEAN: BinaryReader.read_bool,
    ColumnType.INT8: BinaryReader.read_int8,
    ColumnType.UINT8: BinaryReader.read_uint8,
    ColumnType.INT16: BinaryReader.read_int16,
    ColumnType.UINT16: BinaryReader.read_uint16,
    ColumnType.INT32: BinaryReader.read_int32,
    ColumnType.UINT32: BinaryReader.read_uint32,
    ColumnType.INT64: BinaryReader.read_int64,
    ColumnType.UINT64: BinaryReader.read_uint64,
    ColumnType.FLOAT: BinaryReader.read_float,
}


def _decode_row(
    reader: BinaryReader,
    columns: Sequence[ColumnDescriptor],
    layout: RecordLayout,
    string_table: StringTable,
    placeholder: str,
    row_index: int,
    warnings: List[StringResolutionWarning],
) -> Row:
    values = []
    for column in columns:
        if column.auto_generated:
            values.append(row_index + 1)
            continue

        if column.type is ColumnType.STRING:
            if layout.has_offset_table:
                values.append(reader.read_cstring())
                continue
            offset = reader.read_int32()
            try:
                values.append(string_table.lookup(offset))
            except KeyError:
                values.append(placeholder)
                warnings.append(StringResolutionWarning(row_index, column.name, offset))
            continue

        if column.is_packed:
            values.append(read_packed(reader, column))
            continue

        read = _READERS.get(column.type)
        if read is None:
            reader.skip(4)
            values.append(None)
        else:
            values.append(read(reader))
    return tuple(values)


def decode_rows(
    reader: BinaryReader,
    columns: Sequence[ColumnDescriptor],
    count: int,
    layout: RecordLayout,
    lengths: Sequence[int] = (),
    string_table: Optional[StringTable] = None,
    placeholder: str = STRING_NOT_FOUND,
) -> Tuple[List[Row], List[StringResolutionWarning]]:
    """Decode `count` records starting at the reader's position.

    Strings are read inline when the layout has an offset table, otherwise
    as 4-byte offsets into string_table. Offsets with no entry decode as
    `placeholder` and are reported in the returned warnings.

    Raises:
        SchemaOverflow: a row consumed more bytes than its record holds.
        TruncatedDataError: a record extends past the end of the buffer.
    """
    if string_table is None:
        string_table = StringTable()

    rows: List[Row] = []
    warnings: List[StringResolutionWarning] = []

    for i in range(count):
        expected = record_length(i, layout, lengths)
        start = reader.position

        try:
            row = _decode_row(reader, columns, layout, string_table, placeholder, len(rows), warnings)
        except TruncatedDataError as e:
            # The record is intact; the definition ran past it
            if start + expected <= reader.length:
                raise SchemaOverflow(i, e.offset + e.length - start, expected) from e
            raise

        consumed = reader.position - start
        if consumed > expected:
            raise SchemaOverflow(i, consumed, expected)
        if consumed < expected:
            # Trailing padding
            reader.skip(expected - consumed)

        rows.append(row)

    return rows, warnings
