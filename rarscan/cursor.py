from __future__ import annotations

from typing import Union

from .errors import CursorBoundsError


Buffer = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """Sequential little-endian reader over an immutable byte buffer.

    Every read checks bounds before moving, so a failed read leaves
    ``position`` where it was.
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: Buffer):
        self._data = memoryview(bytes(data))
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def is_eof(self) -> bool:
        return self._pos >= len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def can_read(self, n: int) -> bool:
        return n >= 0 and self._pos + n <= len(self._data)

    def _require(self, n: int, what: str) -> None:
        if n < 0:
            raise ValueError(f"{what}: negative count {n}")
        if not self.can_read(n):
            raise CursorBoundsError(
                f"Attempted to {what} {n} bytes at offset {self._pos} but only {self.remaining()} remain"
            )

    def read_byte(self) -> int:
        self._require(1, "read")
        b = self._data[self._pos]
        self._pos += 1
        return b

    def read_bytes(self, n: int) -> bytes:
        self._require(n, "read")
        out = self._data[self._pos : self._pos + n].tobytes()
        self._pos += n
        return out

    def peek_bytes(self, n: int) -> bytes:
        self._require(n, "peek")
        return self._data[self._pos : self._pos + n].tobytes()

    def read_u16(self) -> int:
        self._require(2, "read")
        b0 = self.read_byte()
        b1 = self.read_byte()
        return (b1 << 8) | b0

    def read_u32(self) -> int:
        self._require(4, "read")
        b0 = self.read_byte()
        b1 = self.read_byte()
        b2 = self.read_byte()
        b3 = self.read_byte()
        return (b3 << 24) | (b2 << 16) | (b1 << 8) | b0

    def skip(self, n: int) -> None:
        self._require(n, "skip")
        self._pos += n
