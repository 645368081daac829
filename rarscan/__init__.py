"""
rarscan — metadata-only indexer for RAR 4.x archives.

Features:

- Walks the block stream of a RAR 1.5 - 4.x archive held in memory and lists
  its members (name, packed size, unpacked size, directory flag).
- Never decompresses or extracts payloads; CRCs are not verified.
- Tolerates damaged or partially written archives: implausible or unknown
  block headers are skipped byte by byte until the stream resynchronizes.
- CLI to list a single archive, summarize it, or scan many archives at once.

Multi-volume, encrypted-header and RAR 5.x archives are not supported.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "cursor",
    "blocks",
    "parser",
    "reader",
    "errors",
]

# Programmatic API: rarscan.parser.parse_rar4 for buffers, rarscan.reader.ArchiveReader
# for paths, and the cmd_* functions in rarscan.cli.
