"""Bit-packed integer fields.

Integer columns may be stored in fewer bits than their native width. The
packed value occupies ceil(bits / 8) little-endian bytes; signed values are
sign-extended on read and every value is truncated to its low bits on
write. Out-of-range values are not rejected.
"""

from typing import Optional

from wdbx.binary_io import BinaryReader, BinaryWriter
from wdbx.models import ColumnDescriptor


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def byte_count(bits: Optional[int], native_bits: int) -> int:
    """Bytes occupied on disk by a field of the given width."""
    if bits is None or bits >= native_bits:
        return native_bits // 8
    return (bits + 7) // 8


def decode_bits(value: int, bits: Optional[int], native_bits: int, signed: bool) -> int:
    """Widen a packed value back to its native width.

    Signed values are shifted left by (native - bits) and arithmetically
    shifted back, which copies the top packed bit into the high bits.
    """
    if bits is None or bits >= native_bits:
        return value

    if not signed:
        return value & _mask(bits)

    shift = native_bits - bits
    widened = (value << shift) & _mask(native_bits)
    if widened & (1 << (native_bits - 1)):
        widened -= 1 << native_bits
    return widened >> shift


def encode_bits(value: int, bits: Optional[int], native_bits: int) -> int:
    """Truncate a value to its low bits (two's complement for negatives)."""
    if bits is None or bits >= native_bits:
        return value
    return value & _mask(bits)


def read_packed(reader: BinaryReader, column: ColumnDescriptor) -> int:
    """Read a packed integer column from the cursor."""
    native = column.type.native_bits
    raw = int.from_bytes(reader.read_bytes(byte_count(column.bits, native)), "little")
    return decode_bits(raw, column.bits, native, column.type.signed)


def write_packed(writer: BinaryWriter, column: ColumnDescriptor, value: int) -> None:
    """Write a packed integer column at the cursor."""
    size = byte_count(column.bits, column.type.native_bits)
    packed = encode_bits(int(value), column.bits, column.type.native_bits)
    writer.write_bytes(packed.to_bytes(size, "little"))
