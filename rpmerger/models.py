from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

DEFAULT_PACK_NAME = "Merged Resource Pack"
DEFAULT_DESCRIPTION = "A combination of multiple resource packs merged together"
DEFAULT_PACK_FORMAT = 15


class MergePhase(str, Enum):
    LOADING = "Loading resource packs..."
    METADATA = "Creating pack metadata..."
    ICON = "Adding pack icon..."
    MERGING = "Merging resource pack files..."
    BUILDING = "Building final resource pack..."
    GENERATING = "Generating download..."
    COMPLETE = "Complete!"


@dataclass(slots=True)
class PackInput:
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class PackMetadata:
    name: str = DEFAULT_PACK_NAME
    description: str = DEFAULT_DESCRIPTION
    format_version: int = DEFAULT_PACK_FORMAT
    icon_bytes: bytes | None = None

    @property
    def effective_description(self) -> str:
        return self.description if self.description else DEFAULT_DESCRIPTION


@dataclass(slots=True, frozen=True)
class ArchiveEntry:
    position: int
    path: str
    is_dir: bool


@dataclass(slots=True)
class PathConflict:
    path: str
    sources: List[str]
    winner: str

    @property
    def losers(self) -> List[str]:
        # winner is always the last source
        return self.sources[:-1]


@dataclass(slots=True)
class SkippedEntry:
    source: str
    path: str
    reason: str


@dataclass(slots=True)
class SourceStats:
    index: int
    name: str
    size: int
    entries: int = 0
    kept: int = 0
    overridden: int = 0


@dataclass(slots=True)
class MergeResult:
    archive_bytes: bytes
    filename: str
    file_map_paths: List[str] = field(default_factory=list)
    origins: Dict[str, str] = field(default_factory=dict)
    conflicts: List[PathConflict] = field(default_factory=list)
    skipped_entries: List[SkippedEntry] = field(default_factory=list)
    source_stats: List[SourceStats] = field(default_factory=list)
    has_icon: bool = False

    @property
    def file_count(self) -> int:
        return len(self.file_map_paths)

    @property
    def size(self) -> int:
        return len(self.archive_bytes)
