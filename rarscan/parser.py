from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from .blocks import peek_block_header, read_file_head_fields
from .constants import (
    ATTR_DIRECTORY,
    BLOCK_FILE,
    BLOCK_HEADER_SIZE,
    BLOCK_MAIN,
    DEFAULT_NAME_ENCODING,
    FILE_HEAD_FIXED_SIZE,
    FORMAT_RAR4,
    FORMAT_RAR5,
    PATH_SEPARATOR,
    RAR4_MAGIC,
    RAR5_MAGIC,
)
from .cursor import Buffer, ByteCursor
from .errors import BadSignatureError, TruncatedNameError


@dataclass(frozen=True)
class RarEntry:
    name: str
    uncompressed_size: int
    compressed_size: int
    is_directory: bool
    raw_name: bytes = b""
    name_encoding: str = DEFAULT_NAME_ENCODING
    header_offset: int = 0

    def decode_name(self, encoding: str) -> str:
        """Re-decode the stored name bytes with another codec."""
        return self.raw_name.decode(encoding, errors="replace")

    def to_dict(self) -> Dict:
        d = asdict(self)
        d.pop("raw_name")
        return d


def detect_format(data: Buffer) -> Optional[str]:
    head = bytes(data[: len(RAR5_MAGIC)])
    if head.startswith(RAR5_MAGIC):
        return FORMAT_RAR5
    if head.startswith(RAR4_MAGIC):
        return FORMAT_RAR4
    return None


def _check_signature(cursor: ByteCursor, data: Buffer) -> None:
    if cursor.can_read(len(RAR4_MAGIC)) and cursor.read_bytes(len(RAR4_MAGIC)) == RAR4_MAGIC:
        return
    if detect_format(data) == FORMAT_RAR5:
        raise BadSignatureError("Not a valid RAR 4.x file (RAR 5.x archives are not supported).")
    raise BadSignatureError("Not a valid RAR 4.x file.")


def _is_directory(attr: int, name: str) -> bool:
    return bool(attr & ATTR_DIRECTORY) or name.endswith(PATH_SEPARATOR)


def parse_rar4(data: Buffer, *, name_encoding: str = DEFAULT_NAME_ENCODING) -> List[RarEntry]:
    """Walk the block stream of a RAR 4.x archive and return its file entries.

    Payloads are skipped, never decompressed. Block headers that are
    implausible or of an unknown type are stepped over one byte at a time
    until the next plausible header; running out of data for a header,
    header residual or payload ends the walk with the entries found so far.

    Raises:
        BadSignatureError: ``data`` does not start with the RAR 4.x marker.
        TruncatedNameError: a file header's name runs past the end of ``data``.
    """
    cursor = ByteCursor(data)
    _check_signature(cursor, data)

    entries: List[RarEntry] = []
    while not cursor.is_eof:
        block_start = cursor.position
        if not cursor.can_read(BLOCK_HEADER_SIZE):
            break

        hdr = peek_block_header(cursor)
        if not hdr.is_plausible(cursor.remaining() - BLOCK_HEADER_SIZE):
            # Resynchronize from the byte after block_start
            cursor.skip(1)
            continue
        cursor.skip(BLOCK_HEADER_SIZE)

        if hdr.block_type == BLOCK_MAIN:
            cursor.skip(hdr.body_size)
        elif hdr.block_type == BLOCK_FILE:
            if not cursor.can_read(FILE_HEAD_FIXED_SIZE):
                break
            fields = read_file_head_fields(cursor)
            if not cursor.can_read(fields.name_size):
                raise TruncatedNameError(block_start, entries)
            raw_name = cursor.read_bytes(fields.name_size)
            name = raw_name.decode(name_encoding, errors="replace")
            entries.append(
                RarEntry(
                    name=name,
                    uncompressed_size=fields.unp_size,
                    compressed_size=fields.pack_size,
                    is_directory=_is_directory(fields.attr, name),
                    raw_name=raw_name,
                    name_encoding=name_encoding,
                    header_offset=block_start,
                )
            )

            # Header extension fields (high sizes, salt, ext time, ...) are not modelled
            residual = hdr.size - (cursor.position - block_start)
            if residual > 0:
                if not cursor.can_read(residual):
                    break
                cursor.skip(residual)

            if not cursor.can_read(fields.pack_size):
                break
            cursor.skip(fields.pack_size)
        else:
            if not cursor.can_read(1):
                break
            cursor.skip(1)

    return entries
