"""Header variants for WDBC, WDB2 and WDB5 table files.

Each variant parses its own header fields after the 4-byte signature and
writes them back in the same order. The variant tag (FormatVariant) is what
the codec switches on; the classes only carry variant-specific fields and
the auxiliary table emitters.

WDBC header (20 bytes):
  [00-03] Signature
  [04-07] Record count
  [08-11] Field count
  [12-15] Record size
  [16-19] String block size

WDB2 header (48 bytes, + id/length arrays when max_id != 0):
  [20-23] Table hash      [24-27] Build        [28-31] Timestamp
  [32-35] Min id          [36-39] Max id       [40-43] Locale
  [44-47] Copy table size

WDB5 header (48 bytes + field structure):
  [20-23] Table hash      [24-27] Layout hash  [28-31] Min id
  [32-35] Max id          [36-39] Locale       [40-43] Copy table size
  [44-45] Flags           [46-47] Id index
  then field_count x (i16 bits, u16 offset)

After the records WDB5 may carry, in order: string block (no offset map)
or offset map, index table, copy table.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.constants import (
    COPY_TABLE_ENTRY_SIZE,
    SIG_WCH2,
    SIG_WDB2,
    SIG_WDB5,
    SIG_WDBC,
    SIGNATURE_LEADING_MARKER,
    WDB2_HEADER_SIZE,
    WDB5_FLAG_INDEX_TABLE,
    WDB5_FLAG_OFFSET_MAP,
    WDB5_FLAG_SECOND_INDEX,
    WDB5_HEADER_SIZE,
    WDBC_HEADER_SIZE,
)
from wdbx.errors import (
    EmptyFile,
    InvalidFile,
    SchemaOverflow,
    TruncatedDataError,
    UnknownFormat,
)
from wdbx.models import ColumnType, OffsetEntry, Row

if TYPE_CHECKING:
    from wdbx.models import Table


class FormatVariant(Enum):
    """Supported header generations."""

    WDBC = "WDBC"
    WDB2 = "WDB2"
    WDB5 = "WDB5"


@dataclass
class FieldStructureEntry:
    """WDB5 per-field layout: size encoded as (32 - bits) and byte offset."""

    bits: int
    offset: int

    @property
    def byte_count(self) -> int:
        return (32 - self.bits) // 8

    @classmethod
    def for_size(cls, byte_count: int, offset: int) -> "FieldStructureEntry":
        return cls(bits=32 - byte_count * 8, offset=offset)


@dataclass
class DBHeader:
    """Fields shared by every variant."""

    variant: ClassVar[FormatVariant]
    header_size: ClassVar[int]

    signature: str = ""
    record_count: int = 0
    field_count: int = 0
    record_size: int = 0
    string_block_size: int = 0
    # Signature was stored with reversed byte order
    reversed_signature: bool = False

    # ---- flags ---- #

    @property
    def has_offset_table(self) -> bool:
        return False

    @property
    def has_index_table(self) -> bool:
        return False

    @property
    def has_second_index(self) -> bool:
        return False

    @property
    def extended_string_table(self) -> bool:
        return False

    @property
    def allows_duplicate_strings(self) -> bool:
        return False

    @property
    def is_legion_file(self) -> bool:
        return self.variant is FormatVariant.WDB5

    @property
    def fixed_layout(self) -> bool:
        return self.variant in (FormatVariant.WDBC, FormatVariant.WDB2)

    @property
    def is_valid_file(self) -> bool:
        return self.record_count != 0 and self.record_size != 0

    # ---- read ---- #

    def read_header(self, reader: BinaryReader) -> None:
        """Parse the fields following the signature."""
        self.record_count = reader.read_uint32()
        self.field_count = reader.read_uint32()
        self.record_size = reader.read_uint32()
        self.string_block_size = reader.read_uint32()

    # ---- write ---- #

    def stored_columns(self, table: "Table") -> List[int]:
        """Indices of columns serialised inside each record."""
        return [
            i
            for i, c in enumerate(table.columns)
            if not c.auto_generated and not (self.has_index_table and i == table.key)
        ]

    def output_record_size(self, table: "Table") -> int:
        if self.record_size:
            return self.record_size
        return sum(table.columns[i].byte_size for i in self.stored_columns(table))

    def output_field_count(self, table: "Table") -> int:
        if self.field_count:
            return self.field_count
        return len(self.stored_columns(table))

    def _write_signature(self, writer: BinaryWriter) -> None:
        sig = self.signature or self.variant.value
        if self.reversed_signature:
            sig = sig[::-1]
        writer.write_bytes(sig.encode("ascii"))

    def write_header(
        self,
        writer: BinaryWriter,
        table: "Table",
        rows: Sequence[Row],
        copies: Sequence[Tuple[int, int]] = (),
    ) -> None:
        """Write the header; the string block size is back-patched later."""
        self._write_signature(writer)
        writer.write_uint32(len(rows))
        writer.write_uint32(self.output_field_count(table))
        writer.write_uint32(self.output_record_size(table))
        writer.write_uint32(0)

    def write_record_padding(
        self, writer: BinaryWriter, table: "Table", row_start: int, row_index: int = 0
    ) -> None:
        """Zero-fill the rest of a fixed-size record.

        Raises:
            SchemaOverflow: the row is wider than the record size.
        """
        size = self.output_record_size(table)
        written = writer.position - row_start
        if written > size:
            raise SchemaOverflow(row_index, written, size)
        if written < size:
            writer.write_bytes(b"\x00" * (size - written))

    def describe(self) -> Dict[str, object]:
        return {
            "signature": self.signature,
            "variant": self.variant.value,
            "record_count": self.record_count,
            "field_count": self.field_count,
            "record_size": self.record_size,
            "string_block_size": self.string_block_size,
            "has_offset_table": self.has_offset_table,
            "has_index_table": self.has_index_table,
            "has_second_index": self.has_second_index,
        }


@dataclass
class WDBCHeader(DBHeader):
    """Classic fixed-layout header."""

    variant: ClassVar[FormatVariant] = FormatVariant.WDBC
    header_size: ClassVar[int] = WDBC_HEADER_SIZE


@dataclass
class WDB2Header(DBHeader):
    """Fixed layout with build metadata and an optional id lookup block."""

    variant: ClassVar[FormatVariant] = FormatVariant.WDB2
    header_size: ClassVar[int] = WDB2_HEADER_SIZE

    table_hash: int = 0
    build: int = 0
    timestamp: int = 0
    min_id: int = 0
    max_id: int = 0
    locale: int = 0
    copy_table_size: int = 0

    @property
    def extended_string_table(self) -> bool:
        return self.max_id != 0

    @property
    def allows_duplicate_strings(self) -> bool:
        return self.max_id != 0

    def read_header(self, reader: BinaryReader) -> None:
        super().read_header(reader)
        self.table_hash = reader.read_uint32()
        self.build = reader.read_uint32()
        self.timestamp = reader.read_uint32()
        self.min_id = reader.read_int32()
        self.max_id = reader.read_int32()
        self.locale = reader.read_int32()
        self.copy_table_size = reader.read_int32()

        if self.max_id != 0:
            # id -> row index (u32) and per-row string length (u16) arrays
            diff = self.max_id - self.min_id + 1
            reader.skip(diff * 4 + diff * 2)

    def write_header(self, writer, table, rows, copies=()):
        super().write_header(writer, table, rows, copies)
        min_id, max_id = self.min_id, self.max_id
        if max_id != 0:
            ids = [table.row_id(r) for r in rows]
            min_id, max_id = min(ids), max(ids)

        writer.write_uint32(self.table_hash)
        writer.write_uint32(self.build)
        writer.write_uint32(self.timestamp)
        writer.write_int32(min_id)
        writer.write_int32(max_id)
        writer.write_int32(self.locale)
        writer.write_int32(self.copy_table_size)

        if max_id != 0:
            self._write_id_lookup(writer, table, rows, min_id, max_id)

    def _write_id_lookup(self, writer, table, rows, min_id, max_id):
        string_cols = [i for i, c in enumerate(table.columns) if c.type is ColumnType.STRING]
        positions = {}
        lengths = {}
        for index, row in enumerate(rows):
            row_id = table.row_id(row)
            positions[row_id] = index
            lengths[row_id] = sum(
                len((row[i] or "").encode(writer.encoding)) for i in string_cols
            )

        for row_id in range(min_id, max_id + 1):
            writer.write_uint32(positions.get(row_id, 0))
        for row_id in range(min_id, max_id + 1):
            writer.write_uint16(min(lengths.get(row_id, 0), 0xFFFF))

    def describe(self):
        info = super().describe()
        info.update(build=self.build, min_id=self.min_id, max_id=self.max_id, locale=self.locale)
        return info


@dataclass
class WDB5Header(DBHeader):
    """Legion layout with field structure, offset map, index and copy tables."""

    variant: ClassVar[FormatVariant] = FormatVariant.WDB5
    header_size: ClassVar[int] = WDB5_HEADER_SIZE

    table_hash: int = 0
    layout_hash: int = 0
    min_id: int = 0
    max_id: int = 0
    locale: int = 0
    copy_table_size: int = 0
    flags: int = 0
    id_index: int = 0
    field_structure: List[FieldStructureEntry] = field(default_factory=list)
    # ids whose offset map slot repeats another row's data: id -> row index
    offset_duplicates: Dict[int, int] = field(default_factory=dict)

    @property
    def has_offset_table(self) -> bool:
        return bool(self.flags & WDB5_FLAG_OFFSET_MAP)

    @property
    def has_second_index(self) -> bool:
        return bool(self.flags & WDB5_FLAG_SECOND_INDEX)

    @property
    def has_index_table(self) -> bool:
        return bool(self.flags & WDB5_FLAG_INDEX_TABLE)

    def read_header(self, reader: BinaryReader) -> None:
        super().read_header(reader)
        self.table_hash = reader.read_uint32()
        self.layout_hash = reader.read_uint32()
        self.min_id = reader.read_int32()
        self.max_id = reader.read_int32()
        self.locale = reader.read_int32()
        self.copy_table_size = reader.read_int32()
        self.flags = reader.read_uint16()
        self.id_index = reader.read_uint16()

        self.field_structure = []
        for _ in range(self.field_count):
            bits = reader.read_int16()
            offset = reader.read_uint16()
            self.field_structure.append(FieldStructureEntry(bits=bits, offset=offset))

    # ---- record data ---- #

    def _id_field(self) -> Tuple[int, int]:
        """(byte offset, byte count) of the id inside a record body."""
        if self.id_index < len(self.field_structure):
            entry = self.field_structure[self.id_index]
            return entry.offset, entry.byte_count
        return 0, 4

    def read_data(
        self,
        reader: BinaryReader,
        data_start: int,
        index_table_start: int,
        copy_table_start: int,
    ) -> Tuple[bytes, List[int]]:
        """Assemble every record, copies included, into one buffer.

        Records are prefixed with their 4-byte id when the id lives in the
        index table. Returns the buffer and the byte length of each record.
        """
        spans: List[Tuple[int, int, int]] = []
        self.offset_duplicates = {}

        if self.has_offset_table:
            reader.seek(self.string_block_size)
            first: Dict[int, int] = {}
            for slot in range(self.max_id - self.min_id + 1):
                offset = reader.read_uint32()
                length = reader.read_uint16()
                if offset == 0 or length == 0:
                    continue
                if self.copy_table_size == 0:
                    if offset in first:
                        self.offset_duplicates[self.min_id + slot] = first[offset]
                        continue
                    first[offset] = len(spans)
                spans.append((self.min_id + slot, offset, length))

        indexes: Optional[List[int]] = None
        if self.has_index_table:
            reader.seek(index_table_start)
            indexes = [reader.read_int32() for _ in range(self.record_count)]

        records: List[bytes] = []
        by_id: Dict[int, int] = {}
        id_offset, id_size = (0, 4) if indexes is not None else self._id_field()

        count = len(spans) if self.has_offset_table else self.record_count
        for i in range(count):
            if self.has_offset_table:
                slot_id, offset, length = spans[i]
                reader.seek(offset)
                body = reader.read_bytes(length)
                row_id = indexes[i] if indexes is not None and i < len(indexes) else slot_id
            else:
                reader.seek(data_start + i * self.record_size)
                body = reader.read_bytes(self.record_size)
                if indexes is not None:
                    row_id = indexes[i]
                else:
                    row_id = int.from_bytes(body[id_offset:id_offset + id_size], "little")

            if indexes is not None:
                body = (row_id & 0xFFFFFFFF).to_bytes(4, "little") + body
            by_id[row_id] = len(records)
            records.append(body)

        if self.copy_table_size:
            reader.seek(copy_table_start)
            for _ in range(self.copy_table_size // COPY_TABLE_ENTRY_SIZE):
                new_id = reader.read_int32()
                source_id = reader.read_int32()
                if source_id not in by_id:
                    raise InvalidFile(f"Copy table references unknown id {source_id}")
                row = bytearray(records[by_id[source_id]])
                mask = (1 << (id_size * 8)) - 1
                row[id_offset:id_offset + id_size] = (new_id & mask).to_bytes(id_size, "little")
                by_id[new_id] = len(records)
                records.append(bytes(row))

        return b"".join(records), [len(r) for r in records]

    # ---- write ---- #

    def _id_range(self, table: "Table") -> Tuple[int, int]:
        """Smallest and largest id over every row and offset map duplicate."""
        ids = [table.row_id(r) for r in table.rows] + list(self.offset_duplicates)
        if not ids:
            return 0, 0
        return min(ids), max(ids)

    def output_field_structure(self, table: "Table") -> List[FieldStructureEntry]:
        if self.field_structure:
            return list(self.field_structure)
        entries = []
        offset = 0
        for i in self.stored_columns(table):
            size = table.columns[i].byte_size
            entries.append(FieldStructureEntry.for_size(size, offset))
            offset += size
        return entries

    def output_field_count(self, table: "Table") -> int:
        return len(self.output_field_structure(table))

    def write_header(self, writer, table, rows, copies=()):
        super().write_header(writer, table, rows, copies)
        min_id, max_id = self._id_range(table)

        writer.write_uint32(self.table_hash)
        writer.write_uint32(self.layout_hash)
        writer.write_int32(min_id)
        writer.write_int32(max_id)
        writer.write_int32(self.locale)
        writer.write_int32(len(copies) * COPY_TABLE_ENTRY_SIZE)
        writer.write_uint16(self.flags)
        writer.write_uint16(self.id_index)

        for entry in self.output_field_structure(table):
            writer.write_int16(entry.bits)
            writer.write_uint16(entry.offset)

    def write_record_padding(self, writer, table, row_start, row_index=0):
        if not self.has_offset_table:
            super().write_record_padding(writer, table, row_start, row_index)

    def write_offset_map(
        self,
        writer: BinaryWriter,
        table: "Table",
        rows: Sequence[Row],
        offset_map: Sequence[OffsetEntry],
    ) -> None:
        """One (u32 offset, u16 length) slot per id in [min_id, max_id]."""
        min_id, max_id = self._id_range(table)
        by_id = {table.row_id(row): entry for row, entry in zip(rows, offset_map)}
        for row_id, index in self.offset_duplicates.items():
            if row_id not in by_id and index < len(offset_map):
                by_id[row_id] = offset_map[index]

        for row_id in range(min_id, max_id + 1):
            entry = by_id.get(row_id)
            if entry is None:
                writer.write_uint32(0)
                writer.write_uint16(0)
            else:
                writer.write_uint32(entry.offset)
                writer.write_uint16(entry.length)

    def write_index_table(self, writer: BinaryWriter, table: "Table", rows: Sequence[Row]) -> None:
        for row in rows:
            writer.write_uint32(table.row_id(row) & 0xFFFFFFFF)

    def write_copy_table(self, writer: BinaryWriter, copies: Sequence[Tuple[int, int]]) -> None:
        for new_id, source_id in copies:
            writer.write_int32(new_id)
            writer.write_int32(source_id)

    def describe(self):
        info = super().describe()
        info.update(
            min_id=self.min_id,
            max_id=self.max_id,
            locale=self.locale,
            flags=self.flags,
            id_index=self.id_index,
            copy_table_size=self.copy_table_size,
        )
        return info


HEADER_TYPES = {
    SIG_WDBC: WDBCHeader,
    SIG_WDB2: WDB2Header,
    SIG_WCH2: WDB2Header,
    SIG_WDB5: WDB5Header,
}

VARIANT_HEADERS = {
    FormatVariant.WDBC: WDBCHeader,
    FormatVariant.WDB2: WDB2Header,
    FormatVariant.WDB5: WDB5Header,
}


def create_header(variant: FormatVariant, **fields) -> DBHeader:
    """Build an empty header for writing a new table."""
    return VARIANT_HEADERS[variant](signature=variant.value, **fields)


def extract_header(reader: BinaryReader) -> DBHeader:
    """Identify the variant from the signature and parse its header.

    Leaves the reader positioned at the first record byte.

    Raises:
        UnknownFormat: blank or unsupported signature.
        EmptyFile: the header reports no records or a zero record size.
        TruncatedDataError: the data is shorter than the fixed header.
    """
    raw = reader.read_signature()
    if not raw.strip(b"\x00 \t\r\n"):
        raise UnknownFormat(raw)

    reversed_signature = raw[0] != SIGNATURE_LEADING_MARKER
    if reversed_signature:
        raw = raw[::-1]

    signature = raw.decode("ascii", errors="replace")
    header_cls = HEADER_TYPES.get(signature)
    if header_cls is None:
        raise UnknownFormat(raw)
    if reader.length < header_cls.header_size:
        raise TruncatedDataError(0, header_cls.header_size, reader.length)

    header = header_cls(signature=signature, reversed_signature=reversed_signature)
    header.read_header(reader)

    if not header.is_valid_file:
        raise EmptyFile(header.record_count, header.record_size)
    return header
