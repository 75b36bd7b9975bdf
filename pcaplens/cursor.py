from __future__ import annotations

import mmap
import struct
from typing import Union

from .errors import TruncatedRecordError


_U8 = struct.Struct("B")

Buffer = Union[bytes, bytearray, memoryview, mmap.mmap]


class ByteCursor:
    """Bounds-checked sequential reader over a bytes-like buffer.

    Integer reads use ``byte_order`` (a struct prefix, ``"<"`` or ``">"``).
    A read that would run past the end raises ``TruncatedRecordError`` and
    leaves the position where it was.
    """

    def __init__(self, buffer: Buffer, byte_order: str = "<", offset: int = 0) -> None:
        if byte_order not in ("<", ">"):
            raise ValueError(f"unsupported byte order {byte_order!r}")
        self._buf = buffer
        self._order = byte_order
        self._structs = {
            "H": struct.Struct(f"{byte_order}H"),
            "I": struct.Struct(f"{byte_order}I"),
            "i": struct.Struct(f"{byte_order}i"),
        }
        self._offset = 0
        self.seek(offset)

    @property
    def byte_order(self) -> str:
        return self._order

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._offset

    def at_end(self) -> bool:
        return self._offset >= len(self._buf)

    def with_byte_order(self, byte_order: str) -> "ByteCursor":
        return ByteCursor(self._buf, byte_order=byte_order, offset=self._offset)

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._buf):
            raise ValueError(f"seek to {offset} outside buffer of {len(self._buf)} bytes")
        self._offset = offset

    def _require(self, count: int) -> None:
        if count < 0:
            raise ValueError("count must be non-negative")
        if self.remaining < count:
            raise TruncatedRecordError(count, self.remaining, self._offset)

    def skip(self, count: int) -> None:
        self._require(count)
        self._offset += count

    def peek(self, count: int) -> bytes:
        self._require(count)
        return bytes(self._buf[self._offset:self._offset + count])

    def read(self, count: int) -> bytes:
        data = self.peek(count)
        self._offset += count
        return data

    def _unpack(self, code: str, width: int) -> int:
        self._require(width)
        value = self._structs[code].unpack_from(self._buf, self._offset)[0]
        self._offset += width
        return value

    def u8(self) -> int:
        self._require(1)
        value = _U8.unpack_from(self._buf, self._offset)[0]
        self._offset += 1
        return value

    def u16(self) -> int:
        return self._unpack("H", 2)

    def u32(self) -> int:
        return self._unpack("I", 4)

    def i32(self) -> int:
        return self._unpack("i", 4)


def big_endian(data: Buffer, offset: int = 0) -> ByteCursor:
    """Cursor for wire-format fields, which are network order whatever the file says."""
    return ByteCursor(data, byte_order=">", offset=offset)
