"""WDBX codec - full-file read and write.

Coordinates header detection, layout planning, string table handling and
the row codec for every supported variant.

Read:
  1. Resolve the header variant from the signature
  2. Resolve the column schema for the requested table
  3. Plan the layout and load the string table (when the records use one)
  4. WDB5: assemble records from the offset map / index / copy tables
  5. Decode rows

Write:
  1. Header placeholder
  2. Records (WDB5 without an offset map writes unique rows only)
  3. Back-patch the string block size and append the string table
  4. WDB5: offset map, index table, copy table
"""

import os
from typing import List, Optional, Tuple

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.config.settings import Settings
from wdbx.constants import STRING_TABLE_OFFSET
from wdbx.definitions import DefinitionRegistry
from wdbx.errors import EmptyFile
from wdbx.headers import DBHeader, extract_header
from wdbx.layout import iteration_count, plan_layout
from wdbx.models import ReadResult, Row, Table, WriteResult
from wdbx.row_decoder import decode_rows
from wdbx.row_encoder import encode_rows
from wdbx.string_table import StringTable
from wdbx.utils.logging import log_warning


def _table_name(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


class DBReader:
    """Reads table files into Table objects."""

    def __init__(self, definitions: DefinitionRegistry, settings: Optional[Settings] = None):
        self.definitions = definitions
        self.settings = settings or Settings()

    def read_header(self, data: bytes) -> DBHeader:
        """Parse only the header (no schema needed)."""
        return extract_header(BinaryReader(data, encoding=self.settings.encoding))

    def read(self, data: bytes, name: str) -> ReadResult:
        """Decode a complete table file.

        Args:
            data: Raw file contents.
            name: Table name used to look up the column definition.

        Raises:
            UnknownFormat: unrecognised signature.
            EmptyFile: no records or zero record size.
            MissingSchema: no definition for `name`.
            SchemaOverflow: the definition is wider than the records.
        """
        encoding = self.settings.encoding
        reader = BinaryReader(data, encoding=encoding)

        header = extract_header(reader)
        data_start = reader.position
        columns = self.definitions.get(name)
        layout = plan_layout(header, len(data), data_start)

        string_table = None
        if layout.has_string_table:
            string_table = StringTable.read(
                data, layout.string_table_start, layout.string_table_end, encoding
            )

        lengths: List[int] = []
        if header.is_legion_file:
            records, lengths = header.read_data(
                reader, data_start, layout.index_table_start, layout.copy_table_start
            )
            reader = BinaryReader(records, encoding=encoding)
        else:
            reader.seek(data_start)

        count = iteration_count(header.record_count, lengths)
        rows, warnings = decode_rows(
            reader,
            columns,
            count,
            layout,
            lengths,
            string_table,
            self.settings.string_not_found,
        )

        if warnings:
            log_warning(f"{name}: {len(warnings)} strings not found in string table")

        table = Table(name=name, header=header, columns=columns, rows=rows)
        return ReadResult(table=table, warnings=warnings)

    def read_file(self, path: str, name: Optional[str] = None) -> ReadResult:
        """Read a table file from disk; the name defaults to the file stem."""
        with open(path, "rb") as f:
            data = f.read()
        return self.read(data, name or _table_name(path))


class DBWriter:
    """Serialises Table objects back into table files."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def _rows_to_write(self, table: Table) -> Tuple[List[Row], List[Tuple[int, int]]]:
        header = table.header
        if (
            header.is_legion_file
            and not header.has_offset_table
            and self.settings.dedupe_rows
        ):
            return table.unique_rows(), table.copy_rows()
        return list(table.rows), []

    def write(self, table: Table) -> WriteResult:
        """Encode a table into file bytes.

        Raises:
            EmptyFile: the table has no rows.
            UnsupportedColumnType: a column cannot be serialised.
        """
        header = table.header
        if not table.rows:
            raise EmptyFile(0, header.record_size)

        writer = BinaryWriter(encoding=self.settings.encoding)
        string_table = StringTable(header.extended_string_table, self.settings.encoding)
        rows, copies = self._rows_to_write(table)

        header.write_header(writer, table, rows, copies)
        offset_map = encode_rows(
            writer, table, rows, string_table, header.allows_duplicate_strings
        )

        if not header.has_offset_table:
            writer.patch_int32(STRING_TABLE_OFFSET, string_table.size)
            writer.write_bytes(string_table.getvalue())

        if header.is_legion_file:
            if header.has_offset_table:
                # The string block field holds the offset map position
                writer.patch_int32(STRING_TABLE_OFFSET, writer.position)
                header.write_offset_map(writer, table, rows, offset_map)

            if header.has_index_table:
                header.write_index_table(writer, table, rows)

            header.write_copy_table(writer, copies)

        return WriteResult(data=writer.getvalue(), offset_map=offset_map)

    def write_file(self, table: Table, path: str) -> WriteResult:
        """Encode a table and write it to path in one pass."""
        result = self.write(table)
        output_dir = os.path.dirname(path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(path, "wb") as f:
            f.write(result.data)
        return result
