from __future__ import annotations

from typing import List, Optional

from .constants import DEFAULT_NAME_ENCODING
from .parser import RarEntry, detect_format, parse_rar4


class ArchiveReader:
    def __init__(self, path: str, *, name_encoding: str = DEFAULT_NAME_ENCODING):
        self.path = path
        self.name_encoding = name_encoding
        self.data: Optional[bytes] = None
        self.entries: List[RarEntry] = []
        self.size: int = 0
        self.fmt: Optional[str] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.data is not None:
            return
        # The whole archive is indexed from memory; this is the only read
        with open(self.path, "rb") as f:
            data = f.read()
        self.size = len(data)
        self.fmt = detect_format(data)
        self.entries = parse_rar4(data, name_encoding=self.name_encoding)
        self.data = data

    def close(self):
        self.data = None

    def list(self) -> List[RarEntry]:
        return self.entries

    def files(self) -> List[RarEntry]:
        return [e for e in self.entries if not e.is_directory]

    def directories(self) -> List[RarEntry]:
        return [e for e in self.entries if e.is_directory]
