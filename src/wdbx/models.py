"""Data models for the WDBX codec.

A table file decodes into a Table: the parsed header, the ordered column
schema resolved from the definitions, and one tuple per record holding a
value for every column in schema order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from wdbx.headers import DBHeader


Row = Tuple[Any, ...]


class ColumnType(Enum):
    """Semantic column types understood by the row codec."""

    BOOLEAN = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT = "float"
    STRING = "string"

    @property
    def native_bits(self) -> int:
        return _NATIVE_BITS[self]

    @property
    def signed(self) -> bool:
        return self in (ColumnType.INT8, ColumnType.INT16, ColumnType.INT32, ColumnType.INT64)

    @property
    def is_integer(self) -> bool:
        return self not in (ColumnType.BOOLEAN, ColumnType.FLOAT, ColumnType.STRING)

    @classmethod
    def parse(cls, name: str) -> "ColumnType":
        key = name.strip().lower()
        key = _TYPE_ALIASES.get(key, key)
        return cls(key)


_NATIVE_BITS = {
    ColumnType.BOOLEAN: 8,
    ColumnType.INT8: 8,
    ColumnType.UINT8: 8,
    ColumnType.INT16: 16,
    ColumnType.UINT16: 16,
    ColumnType.INT32: 32,
    ColumnType.UINT32: 32,
    ColumnType.INT64: 64,
    ColumnType.UINT64: 64,
    ColumnType.FLOAT: 32,
    ColumnType.STRING: 32,
}

# Names used by common definition files
_TYPE_ALIASES = {
    "boolean": "bool",
    "sbyte": "int8",
    "byte": "uint8",
    "short": "int16",
    "ushort": "uint16",
    "int": "int32",
    "uint": "uint32",
    "long": "int64",
    "ulong": "uint64",
    "single": "float",
    "float32": "float",
    "str": "string",
}


@dataclass
class ColumnDescriptor:
    """A single column of a table definition.

    bits narrows an integer column to fewer bits on disk;
    None (or the native width) means the column is stored unpacked.
    Auto-generated columns are synthesised as the 1-based row ordinal and
    never touch the stream.
    """

    name: str
    type: ColumnType
    bits: Optional[int] = None
    auto_generated: bool = False

    def __post_init__(self):
        if self.bits is not None:
            if not self.type.is_integer:
                raise ValueError(f"Column '{self.name}': only integer columns can be bit-packed")
            if self.bits <= 0 or self.bits > self.type.native_bits:
                raise ValueError(
                    f"Column '{self.name}': bit width {self.bits} outside "
                    f"1..{self.type.native_bits}"
                )
            if self.bits == self.type.native_bits:
                self.bits = None

    @property
    def is_packed(self) -> bool:
        return self.bits is not None

    @property
    def byte_size(self) -> int:
        """Bytes this column occupies in a fixed-width record."""
        if self.auto_generated:
            return 0
        if self.is_packed:
            return (self.bits + 7) // 8
        return self.type.native_bits // 8

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.bits is not None:
            data["bits"] = self.bits
        if self.auto_generated:
            data["auto_generated"] = True
        return data


@dataclass
class StringResolutionWarning:
    """A string offset with no entry in the string table."""

    row: int
    column: str
    offset: int

    def __str__(self) -> str:
        return f"row {self.row}, column '{self.column}': no string at offset {self.offset}"


@dataclass
class OffsetEntry:
    """Absolute file offset and byte length of one written record."""

    offset: int
    length: int


@dataclass
class Table:
    """Decoded table: header, column schema and rows."""

    name: str
    header: "DBHeader"
    columns: List[ColumnDescriptor]
    rows: List[Row] = field(default_factory=list)

    # The id column; carried in the index table when one is present
    key: int = 0

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def row_id(self, row: Row) -> int:
        return int(row[self.key])

    def _body(self, row: Row) -> Row:
        """Row values that define duplicate data (everything but id and ordinals)."""
        return tuple(
            v
            for i, (c, v) in enumerate(zip(self.columns, row))
            if i != self.key and not c.auto_generated
        )

    def unique_rows(self) -> List[Row]:
        """First row of every group of rows sharing identical data."""
        seen = set()
        unique = []
        for row in self.rows:
            body = self._body(row)
            if body in seen:
                continue
            seen.add(body)
            unique.append(row)
        return unique

    def copy_rows(self) -> List[Tuple[int, int]]:
        """(new id, source id) pairs for rows that duplicate an earlier row."""
        first: Dict[Row, int] = {}
        copies = []
        for row in self.rows:
            body = self._body(row)
            if body in first:
                copies.append((self.row_id(row), first[body]))
            else:
                first[body] = self.row_id(row)
        return copies

    def as_dicts(self) -> List[Dict[str, Any]]:
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]


@dataclass
class ReadResult:
    """Outcome of a successful read."""

    table: Table
    warnings: List[StringResolutionWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


@dataclass
class WriteResult:
    """Encoded file bytes plus the offset map produced while writing them."""

    data: bytes
    offset_map: List[OffsetEntry] = field(default_factory=list)
