from __future__ import annotations

import io
import zipfile
import zlib
from typing import Iterator, List

from .errors import EntryDecodeError, InputFormatError
from .models import ArchiveEntry, PackInput

PACK_METADATA_FILE = "pack.mcmeta"
PACK_ICON_FILE = "pack.png"
RESERVED_FILES = frozenset({PACK_METADATA_FILE, PACK_ICON_FILE})

# Errors zipfile and zlib raise when a single member cannot be decompressed.
ENTRY_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    OSError,
)


class SourceArchive:
    """Read-only view over one decoded input zip."""

    def __init__(self, index: int, name: str, archive: zipfile.ZipFile, size: int) -> None:
        self.index = index
        self.name = name
        self.size = size
        self._archive = archive

    @classmethod
    def open(cls, index: int, source: PackInput) -> "SourceArchive":
        try:
            archive = zipfile.ZipFile(io.BytesIO(source.data), "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as exc:
            raise InputFormatError(index, source.name, str(exc)) from exc
        return cls(index=index, name=source.name, archive=archive, size=source.size)

    def entries(self) -> Iterator[ArchiveEntry]:
        for position, info in enumerate(self._archive.infolist()):
            yield ArchiveEntry(
                position=position,
                path=info.filename,
                is_dir=info.is_dir(),
            )

    def mergeable_entries(self) -> List[ArchiveEntry]:
        """Entries that take part in a merge: no directories, no reserved files."""

        return [
            entry
            for entry in self.entries()
            if not entry.is_dir and entry.path not in RESERVED_FILES
        ]

    def read(self, entry: ArchiveEntry) -> bytes:
        try:
            return self._archive.read(self._archive.infolist()[entry.position])
        except ENTRY_READ_ERRORS as exc:
            raise EntryDecodeError(self.name, entry.path, str(exc) or type(exc).__name__) from exc

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> "SourceArchive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SourceArchive(index={self.index}, name={self.name!r})"
