"""Bounds-checked little-endian reader over a byte buffer."""

from __future__ import annotations

import struct

from peinspect.errors import CorruptedFileError

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I8 = struct.Struct("<b")
_I16 = struct.Struct("<h")
_I32 = struct.Struct("<i")
_I64 = struct.Struct("<q")


class BinaryReader:
    """Sequential reader that raises ``CorruptedFileError`` on overruns."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._position, 0)

    def seek(self, position: int) -> None:
        """Move to an absolute offset; the end of the buffer is allowed."""
        if 0 <= position <= len(self._data):
            self._position = position
        else:
            raise CorruptedFileError(
                f"Seek position {position} out of bounds {len(self._data)}"
            )

    def _take(self, length: int) -> bytes:
        if self._position + length > len(self._data):
            raise CorruptedFileError(
                f"Not enough data: Need {length} bytes, have {self.remaining}"
            )
        chunk = self._data[self._position : self._position + length]
        self._position += length
        return chunk

    def read_bytes(self, length: int) -> bytes:
        return self._take(length)

    def _unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self._take(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_cstring(self, max_length: int) -> str:
        """Read a NUL-terminated UTF-8 string of at most ``max_length`` bytes."""
        start = self._position
        limit = min(len(self._data), start + max_length)
        end = self._data.find(b"\x00", start, limit)
        if end == -1:
            raw = self._data[start:limit]
            self._position = limit
        else:
            raw = self._data[start:end]
            self._position = end + 1
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise CorruptedFileError("Invalid UTF-8 in string") from None