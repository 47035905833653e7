"""Record layout planning.

Works out where the string block, index table and copy table sit for a
parsed header, and the byte size each record occupies.

Fixed layouts (WDBC/WDB2):
  [header][records: count x size][string block ... end of file]

WDB5, measured back from the end of the file:
  [header][records][string block*][index table*][copy table]
  * string block only without an offset map (those records store their
    strings inline); index table only when flagged.
"""

from dataclasses import dataclass
from typing import Sequence

from wdbx.constants import INDEX_ENTRY_SIZE
from wdbx.headers import DBHeader
from wdbx.utils.logging import log_warning


@dataclass
class RecordLayout:
    """Byte boundaries of one table file."""

    data_start: int
    # Fixed per-record size as seen by the row decoder (id prefix included)
    record_size: int
    string_table_start: int
    string_table_end: int
    has_string_table: bool
    index_table_start: int
    copy_table_start: int
    fixed_layout: bool
    has_offset_table: bool = False


def plan_layout(header: DBHeader, stream_length: int, data_start: int) -> RecordLayout:
    """Compute the layout of a file whose records start at data_start."""
    if header.fixed_layout:
        string_start = data_start + header.record_count * header.record_size
        return RecordLayout(
            data_start=data_start,
            record_size=header.record_size,
            string_table_start=string_start,
            string_table_end=stream_length,
            has_string_table=True,
            index_table_start=stream_length,
            copy_table_start=stream_length,
            fixed_layout=True,
        )

    copy_start = stream_length - header.copy_table_size
    index_start = copy_start
    if header.has_index_table:
        index_start -= header.record_count * INDEX_ENTRY_SIZE

    has_strings = not header.has_offset_table
    string_start = index_start - header.string_block_size if has_strings else index_start

    record_size = header.record_size
    if header.has_index_table:
        record_size += INDEX_ENTRY_SIZE

    return RecordLayout(
        data_start=data_start,
        record_size=record_size,
        string_table_start=string_start,
        string_table_end=index_start,
        has_string_table=has_strings,
        index_table_start=index_start,
        copy_table_start=copy_start,
        fixed_layout=False,
        has_offset_table=header.has_offset_table,
    )


def iteration_count(record_count: int, lengths: Sequence[int]) -> int:
    """Number of records to decode: the larger of the header count and the
    length array.

    Copy-table rows legitimately push the length array past the header
    count. A length array shorter than the header count points at a
    truncated or inconsistent file and is logged.
    """
    if lengths and len(lengths) < record_count:
        log_warning(
            f"Record length array has {len(lengths)} entries but header "
            f"reports {record_count} records"
        )
    return max(len(lengths), record_count)


def record_length(index: int, layout: RecordLayout, lengths: Sequence[int]) -> int:
    """Effective byte size of record `index`."""
    if layout.has_offset_table and index < len(lengths):
        return lengths[index]
    return layout.record_size
