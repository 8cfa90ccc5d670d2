from __future__ import annotations

import base64
import io
import json
import zipfile
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Sequence, Tuple

from .archive_loader import PACK_ICON_FILE, PACK_METADATA_FILE, SourceArchive
from .conflict_detector import OriginTracker, detect_path_conflicts, tally_source_stats
from .errors import EntryDecodeError, ValidationError
from .logging_utils import log_info, log_warn
from .models import (
    ArchiveEntry,
    MergePhase,
    MergeResult,
    PackInput,
    PackMetadata,
    SkippedEntry,
    SourceStats,
)
from .text_utils import sanitize_pack_name

ProgressCallback = Callable[[MergePhase, float], None]
FileMap = Dict[str, bytes]

DEFAULT_COMPRESSION_LEVEL = 6
PROGRESS_BATCH = 50

# 1x1 transparent PNG used as the "no icon chosen" image.
PLACEHOLDER_ICON = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


def _noop_progress(phase: MergePhase, percent: float) -> None:
    return None


def suggest_filename(pack_name: str | None) -> str:
    sanitized = sanitize_pack_name(pack_name)
    if not sanitized:
        sanitized = sanitize_pack_name(PackMetadata().name)
    return f"{sanitized}.zip"


def is_custom_icon(icon_bytes: bytes | None) -> bool:
    return bool(icon_bytes) and icon_bytes != PLACEHOLDER_ICON


def build_pack_mcmeta(metadata: PackMetadata) -> bytes:
    payload = {
        "pack": {
            "pack_format": metadata.format_version,
            "description": metadata.effective_description,
        }
    }
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def _normalize_sources(sources: Sequence[bytes | PackInput]) -> List[PackInput]:
    normalized: List[PackInput] = []
    for position, source in enumerate(sources):
        if isinstance(source, PackInput):
            normalized.append(source)
        elif isinstance(source, (bytes, bytearray, memoryview)):
            normalized.append(PackInput(name=f"pack #{position + 1}", data=bytes(source)))
        else:
            raise ValidationError(
                f"Input #{position + 1} must be bytes or PackInput, got {type(source).__name__}"
            )
    return normalized


def _validate(metadata: PackMetadata, compression_level: int) -> None:
    if isinstance(metadata.format_version, bool) or not isinstance(metadata.format_version, int):
        raise ValidationError(f"pack_format must be an integer, got {metadata.format_version!r}")
    if metadata.format_version < 1:
        raise ValidationError(f"pack_format must be positive, got {metadata.format_version}")
    if not 0 <= compression_level <= 9:
        raise ValidationError(f"Compression level must be between 0 and 9, got {compression_level}")


def _decode_entries(
    archive: SourceArchive,
    entries: Sequence[ArchiveEntry],
    executor: ThreadPoolExecutor | None,
) -> List[Tuple[ArchiveEntry, bytes | EntryDecodeError]]:
    """Read every entry, keeping entry order whether or not a pool is used."""

    def read_one(entry: ArchiveEntry) -> bytes | EntryDecodeError:
        try:
            return archive.read(entry)
        except EntryDecodeError as exc:
            return exc

    if executor is None:
        outcomes = [read_one(entry) for entry in entries]
    else:
        outcomes = list(executor.map(read_one, entries))
    return list(zip(entries, outcomes))


def load_archives(sources: Sequence[PackInput], progress: ProgressCallback) -> List[SourceArchive]:
    """Open every input, closing those already opened if one of them is not a zip."""

    archives: List[SourceArchive] = []
    progress(MergePhase.LOADING, 10)
    try:
        for index, source in enumerate(sources):
            archives.append(SourceArchive.open(index, source))
            progress(MergePhase.LOADING, 10 + (index + 1) * 30 / len(sources))
    except Exception:
        for archive in archives:
            archive.close()
        raise
    return archives


def build_file_map(
    archives: Sequence[SourceArchive],
    tracker: OriginTracker,
    stats: Sequence[SourceStats],
    skipped: List[SkippedEntry],
    progress: ProgressCallback,
    max_workers: int | None = None,
) -> FileMap:
    """Fold all inputs into one path -> content map, later inputs overwriting earlier ones."""

    file_map: FileMap = {}
    executor = ThreadPoolExecutor(max_workers=max_workers) if max_workers and max_workers > 1 else None
    try:
        for archive in archives:
            entries = archive.mergeable_entries()
            stats[archive.index].entries = len(entries)
            for entry, outcome in _decode_entries(archive, entries, executor):
                if isinstance(outcome, EntryDecodeError):
                    log_warn(str(outcome), indent=2)
                    skipped.append(SkippedEntry(source=archive.name, path=entry.path, reason=outcome.reason))
                    continue
                file_map[entry.path] = outcome
                tracker.record(entry.path, archive.index)
            progress(MergePhase.MERGING, 50 + (archive.index + 1) * 35 / len(archives))
    finally:
        if executor is not None:
            executor.shutdown(wait=True)
    return file_map


def write_archive(
    file_map: FileMap,
    pack_mcmeta: bytes,
    icon_bytes: bytes | None,
    progress: ProgressCallback,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(
        buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compression_level
    ) as output:
        output.writestr(PACK_METADATA_FILE, pack_mcmeta)
        if icon_bytes is not None:
            output.writestr(PACK_ICON_FILE, icon_bytes)

        progress(MergePhase.BUILDING, 85)
        total = len(file_map)
        for written, (path, content) in enumerate(file_map.items(), start=1):
            output.writestr(path, content)
            if written % PROGRESS_BATCH == 0:
                progress(MergePhase.BUILDING, 85 + written / total * 10)

        progress(MergePhase.GENERATING, 95)
    return buffer.getvalue()


def merge_packs(
    sources: Sequence[bytes | PackInput],
    metadata: PackMetadata | None = None,
    progress: ProgressCallback | None = None,
    *,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    max_workers: int | None = None,
) -> MergeResult:
    """Merge resource packs in the given order; the last pack providing a path wins.

    Raises ``ValidationError`` for an empty input list or bad metadata and
    ``InputFormatError`` when an input is not a zip archive. Unreadable entries
    inside a valid archive are skipped and reported on the result.
    """

    metadata = metadata or PackMetadata()
    report = progress or _noop_progress
    if not sources:
        raise ValidationError("Please add at least one resource pack!")
    _validate(metadata, compression_level)
    inputs = _normalize_sources(sources)

    archives = load_archives(inputs, report)

    report(MergePhase.METADATA, 45)
    pack_mcmeta = build_pack_mcmeta(metadata)
    report(MergePhase.ICON, 50)
    icon_bytes = metadata.icon_bytes if is_custom_icon(metadata.icon_bytes) else None

    tracker = OriginTracker()
    stats = [SourceStats(index=archive.index, name=archive.name, size=archive.size) for archive in archives]
    skipped: List[SkippedEntry] = []
    try:
        file_map = build_file_map(archives, tracker, stats, skipped, report, max_workers=max_workers)
    finally:
        for archive in archives:
            archive.close()

    archive_bytes = write_archive(file_map, pack_mcmeta, icon_bytes, report, compression_level=compression_level)

    names = [item.name for item in inputs]
    tally_source_stats(tracker, stats)
    result = MergeResult(
        archive_bytes=archive_bytes,
        filename=suggest_filename(metadata.name),
        file_map_paths=sorted(file_map),
        origins={path: names[providers[-1]] for path, providers in tracker.items()},
        conflicts=detect_path_conflicts(tracker, names),
        skipped_entries=skipped,
        source_stats=stats,
        has_icon=icon_bytes is not None,
    )
    report(MergePhase.COMPLETE, 100)
    log_info(
        f"Merged {len(inputs)} pack(s) into {result.file_count} file(s) "
        f"({len(result.conflicts)} overridden path(s), {len(skipped)} skipped entries)."
    )
    return result


__all__ = [
    "PLACEHOLDER_ICON",
    "build_file_map",
    "build_pack_mcmeta",
    "is_custom_icon",
    "load_archives",
    "merge_packs",
    "suggest_filename",
    "write_archive",
]
