"""String table (string block) shared by fixed-layout records.

Read mode indexes every null-terminated run of a byte range by its offset
from the start of the range. Write mode accumulates strings in first-seen
order, reusing offsets for repeated values unless duplicates are allowed.
"""

from typing import Dict, Optional

from wdbx.constants import DEFAULT_ENCODING


class StringTable:
    """Offset-addressed pool of null-terminated strings."""

    def __init__(self, extended: bool = False, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding
        self.extended = extended
        # Offset 0 (and 1 when extended) always reads as the empty string
        self._buf = bytearray(b"\x00\x00" if extended else b"\x00")
        self._lookup: Dict[str, int] = {"": 0}
        self._entries: Dict[int, str] = {0: "", 1: ""} if extended else {0: ""}

    @classmethod
    def read(
        cls,
        data: bytes,
        start: int,
        end: Optional[int] = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> "StringTable":
        """Index the strings in data[start:end]."""
        if end is None:
            end = len(data)
        end = min(end, len(data))

        table = cls(encoding=encoding)
        table._buf = bytearray(data[start:end])
        table._lookup = {}
        table._entries = {}

        pos = start
        while pos < end:
            null = data.find(b"\x00", pos, end)
            if null < 0:
                null = end
            table._entries[pos - start] = data[pos:null].decode(encoding, errors="replace")
            pos = null + 1
        table._entries.setdefault(0, "")
        return table

    def lookup(self, offset: int) -> str:
        """Return the string starting at offset; KeyError if none does."""
        return self._entries[offset]

    def __contains__(self, offset: int) -> bool:
        return offset in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def write(self, value: Optional[str], duplicates: bool = False) -> int:
        """Store a string and return the offset it occupies in the pool."""
        if not value:
            return 0
        if not duplicates and value in self._lookup:
            return self._lookup[value]

        offset = len(self._buf)
        self._buf.extend(value.encode(self.encoding))
        self._buf.append(0)
        if value not in self._lookup:
            self._lookup[value] = offset
        self._entries[offset] = value
        return offset

    @property
    def size(self) -> int:
        """Total bytes the pool will emit, placeholder bytes included."""
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)
