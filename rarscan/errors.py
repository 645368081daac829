class RarscanError(Exception):
    """Base class for rarscan-specific errors."""


# Cursor
class CursorBoundsError(RarscanError, IndexError):
    pass


# Format (fatal for the whole parse)
class ArchiveFormatError(RarscanError, ValueError):
    pass


class BadSignatureError(ArchiveFormatError):
    pass


class TruncatedNameError(ArchiveFormatError):
    def __init__(self, block_offset: int, entries=None):
        super().__init__(f"Incomplete file name data at offset {block_offset}")
        self.block_offset = block_offset
        # Entries fully decoded before the failing block, in archive order
        self.entries = list(entries or [])
