from __future__ import annotations

import struct
from dataclasses import dataclass

from .constants import BLOCK_HEADER_SIZE
from .cursor import ByteCursor


# Common block header (fixed 7 bytes)
# struct: <H B H H
#  - head_crc u16 (not verified)
#  - head_type u8
#  - head_flags u16 (not interpreted)
#  - head_size u16 (includes these 7 bytes)
_BLOCK_HDR_STRUCT = struct.Struct("<HBHH")


@dataclass
class BlockHeader:
    crc: int
    block_type: int
    flags: int
    size: int
    offset: int

    @classmethod
    def unpack(cls, raw: bytes, offset: int) -> "BlockHeader":
        crc, block_type, flags, size = _BLOCK_HDR_STRUCT.unpack(raw[:BLOCK_HEADER_SIZE])
        return cls(crc=crc, block_type=block_type, flags=flags, size=size, offset=offset)

    @property
    def body_size(self) -> int:
        return self.size - BLOCK_HEADER_SIZE

    def is_plausible(self, available: int) -> bool:
        """True when the declared size covers the prefix and fits in ``available`` bytes after it."""
        return self.size >= BLOCK_HEADER_SIZE and self.body_size <= available


def peek_block_header(cursor: ByteCursor) -> BlockHeader:
    return BlockHeader.unpack(cursor.peek_bytes(BLOCK_HEADER_SIZE), cursor.position)


@dataclass
class FileHeadFields:
    pack_size: int
    unp_size: int
    host_os: int
    file_crc: int
    ftime: int
    unp_ver: int
    method: int
    name_size: int
    attr: int


def read_file_head_fields(cursor: ByteCursor) -> FileHeadFields:
    """Decode the fixed file-header fields in stream order.

    Callers must check ``cursor.can_read(FILE_HEAD_FIXED_SIZE)`` first.
    """
    return FileHeadFields(
        pack_size=cursor.read_u32(),
        unp_size=cursor.read_u32(),
        host_os=cursor.read_byte(),
        file_crc=cursor.read_u32(),
        ftime=cursor.read_u32(),
        unp_ver=cursor.read_byte(),
        method=cursor.read_byte(),
        name_size=cursor.read_u16(),
        attr=cursor.read_u32(),
    )
