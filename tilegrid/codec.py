"""Little-endian binary primitives for the archive format.

Every multi-byte value is little-endian regardless of the host platform.
Strings are UTF-8 bytes prefixed with their byte length as a 7-bit
variable-length integer (low 7 bits first, high bit set on every byte except
the last). Booleans are a single byte; any non-zero byte reads as True.
"""

from __future__ import annotations

import math
import struct
from typing import BinaryIO

from .errors import MalformedArchiveError, TruncatedStreamError

_BYTE = struct.Struct("<B")
_BOOL = struct.Struct("<?")
_UINT16 = struct.Struct("<H")
_INT32 = struct.Struct("<i")
_INT64 = struct.Struct("<q")
_FLOAT32 = struct.Struct("<f")

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1
UINT16_MAX = 0xFFFF

# A 32-bit length never needs more than five 7-bit groups.
_MAX_VARINT_BYTES = 5


def to_float32(value: float) -> float:
    """Return ``value`` rounded to the nearest float32, as the archive stores it.

    Raises:
        ValueError: If ``value`` is NaN or too large for a float32
    """
    if math.isnan(value):
        raise ValueError("NaN cannot be stored in an archive")
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError as exc:
        raise ValueError(f"{value} is out of float32 range") from exc


class BinaryWriter:
    """Write archive primitives to a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write_byte(self, value: int) -> None:
        self.stream.write(_BYTE.pack(value))

    def write_bool(self, value: bool) -> None:
        self.stream.write(_BOOL.pack(bool(value)))

    def write_uint16(self, value: int) -> None:
        self.stream.write(_UINT16.pack(value))

    def write_int32(self, value: int) -> None:
        self.stream.write(_INT32.pack(value))

    def write_int64(self, value: int) -> None:
        self.stream.write(_INT64.pack(value))

    def write_float32(self, value: float) -> None:
        self.stream.write(_FLOAT32.pack(value))

    def write_varint(self, value: int) -> None:
        if value < 0:
            raise ValueError("Length prefixes cannot be negative")
        encoded = bytearray()
        while value >= 0x80:
            encoded.append((value & 0x7F) | 0x80)
            value >>= 7
        encoded.append(value)
        self.stream.write(bytes(encoded))

    def write_string(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_varint(len(data))
        self.stream.write(data)


class BinaryReader:
    """Read archive primitives, failing with typed errors on bad input."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.offset = 0

    def read_exact(self, size: int) -> bytes:
        data = self.stream.read(size)
        if data is None or len(data) < size:
            available = 0 if data is None else len(data)
            raise TruncatedStreamError(size, available, self.offset)
        self.offset += size
        return data

    def _unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.read_exact(fmt.size))[0]

    def read_byte(self) -> int:
        return self._unpack(_BYTE)

    def read_bool(self) -> bool:
        return self.read_byte() != 0

    def read_uint16(self) -> int:
        return self._unpack(_UINT16)

    def read_int32(self) -> int:
        return self._unpack(_INT32)

    def read_int64(self) -> int:
        return self._unpack(_INT64)

    def read_float32(self) -> float:
        return self._unpack(_FLOAT32)

    def read_count(self, what: str) -> int:
        """Read an int32 element count and reject negative values."""
        offset = self.offset
        count = self.read_int32()
        if count < 0:
            raise MalformedArchiveError(f"Negative {what} count {count} at offset {offset}")
        return count

    def read_varint(self) -> int:
        value = 0
        for index in range(_MAX_VARINT_BYTES):
            byte = self.read_byte()
            value |= (byte & 0x7F) << (7 * index)
            if not byte & 0x80:
                return value
        raise MalformedArchiveError(f"Length prefix too long at offset {self.offset}")

    def read_string(self) -> str:
        offset = self.offset
        length = self.read_varint()
        if length > INT32_MAX:
            raise MalformedArchiveError(f"String length {length} at offset {offset} exceeds int32")
        data = self.read_exact(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedArchiveError(f"Invalid UTF-8 string at offset {offset}") from exc
