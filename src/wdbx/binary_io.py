"""Little-endian cursors over in-memory buffers.

BinaryReader walks an immutable bytes buffer; BinaryWriter grows a
bytearray and supports seeking back to patch fields already written
(record counts, string block sizes) before the buffer is flushed.
"""

import struct
from typing import Optional

from wdbx.constants import DEFAULT_ENCODING, SIGNATURE_SIZE
from wdbx.errors import TruncatedDataError


_S8 = struct.Struct("<b")
_U8 = struct.Struct("<B")
_S16 = struct.Struct("<h")
_U16 = struct.Struct("<H")
_S32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_S64 = struct.Struct("<q")
_U64 = struct.Struct("<Q")
_F32 = struct.Struct("<f")


class BinaryReader:
    """Typed reads with a moving cursor."""

    def __init__(self, data: bytes, offset: int = 0, encoding: str = DEFAULT_ENCODING):
        self._data = data
        self._pos = offset
        self.encoding = encoding

    @property
    def position(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._data):
            raise TruncatedDataError(offset, 0, len(self._data))
        self._pos = offset

    def skip(self, size: int) -> None:
        self.seek(self._pos + size)

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise TruncatedDataError(self._pos, size, len(self._data))
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _unpack(self, packer: struct.Struct):
        if self._pos + packer.size > len(self._data):
            raise TruncatedDataError(self._pos, packer.size, len(self._data))
        value = packer.unpack_from(self._data, self._pos)[0]
        self._pos += packer.size
        return value

    def read_bytes(self, size: int) -> bytes:
        return self._take(size)

    def read_signature(self) -> bytes:
        """Read the raw 4-byte signature without decoding it."""
        return self._take(SIGNATURE_SIZE)

    def read_bool(self) -> bool:
        return self._unpack(_U8) != 0

    def read_int8(self) -> int:
        return self._unpack(_S8)

    def read_uint8(self) -> int:
        return self._unpack(_U8)

    def read_int16(self) -> int:
        return self._unpack(_S16)

    def read_uint16(self) -> int:
        return self._unpack(_U16)

    def read_int32(self) -> int:
        return self._unpack(_S32)

    def read_uint32(self) -> int:
        return self._unpack(_U32)

    def read_int64(self) -> int:
        return self._unpack(_S64)

    def read_uint64(self) -> int:
        return self._unpack(_U64)

    def read_float(self) -> float:
        return self._unpack(_F32)

    def read_cstring(self) -> str:
        """Read a null-terminated string and step past the terminator."""
        end = self._data.find(b"\x00", self._pos)
        if end < 0:
            raise TruncatedDataError(self._pos, len(self._data) - self._pos + 1, len(self._data))
        raw = self._data[self._pos:end]
        self._pos = end + 1
        return raw.decode(self.encoding, errors="replace")


class BinaryWriter:
    """Typed writes into a growable buffer."""

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self._buf = bytearray()
        self._pos = 0
        self.encoding = encoding

    @property
    def position(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._buf)

    def seek(self, offset: int) -> None:
        """Move the cursor; seeking past the end zero-fills the gap."""
        if offset > len(self._buf):
            self._buf.extend(b"\x00" * (offset - len(self._buf)))
        self._pos = offset

    def write_bytes(self, data: bytes) -> None:
        end = self._pos + len(data)
        if end > len(self._buf):
            self._buf.extend(b"\x00" * (end - len(self._buf)))
        self._buf[self._pos:end] = data
        self._pos = end

    def _pack(self, packer: struct.Struct, value) -> None:
        self.write_bytes(packer.pack(value))

    def write_bool(self, value: bool) -> None:
        self._pack(_U8, 1 if value else 0)

    def write_int8(self, value: int) -> None:
        self._pack(_S8, value)

    def write_uint8(self, value: int) -> None:
        self._pack(_U8, value)

    def write_int16(self, value: int) -> None:
        self._pack(_S16, value)

    def write_uint16(self, value: int) -> None:
        self._pack(_U16, value)

    def write_int32(self, value: int) -> None:
        self._pack(_S32, value)

    def write_uint32(self, value: int) -> None:
        self._pack(_U32, value)

    def write_int64(self, value: int) -> None:
        self._pack(_S64, value)

    def write_uint64(self, value: int) -> None:
        self._pack(_U64, value)

    def write_float(self, value: float) -> None:
        self._pack(_F32, value)

    def write_cstring(self, value: Optional[str]) -> None:
        self.write_bytes((value or "").encode(self.encoding) + b"\x00")

    def patch_int32(self, offset: int, value: int) -> None:
        """Overwrite a 4-byte field and return to the current position."""
        pos = self._pos
        self.seek(offset)
        self.write_int32(value)
        self.seek(pos)

    def pad_to(self, alignment: int) -> None:
        rem = self._pos % alignment
        if rem:
            self.seek(self._pos + (alignment - rem))

    def getvalue(self) -> bytes:
        return bytes(self._buf)
