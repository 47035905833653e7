"""WDBX table codec.

Reads and writes WDBC / WDB2 / WDB5 client data tables against column
definitions supplied by the caller.
"""

from wdbx.codec import DBReader, DBWriter
from wdbx.definitions import DefinitionRegistry, load_definitions
from wdbx.headers import FormatVariant, create_header
from wdbx.models import ColumnDescriptor, ColumnType, ReadResult, Table, WriteResult

__all__ = [
    "DBReader",
    "DBWriter",
    "DefinitionRegistry",
    "load_definitions",
    "FormatVariant",
    "create_header",
    "ColumnDescriptor",
    "ColumnType",
    "ReadResult",
    "Table",
    "WriteResult",
]
