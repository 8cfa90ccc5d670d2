from __future__ import annotations

from pathlib import Path
from typing import Any, List

from openpyxl import Workbook

from .logging_utils import log_conflict, log_ok, log_warn
from .models import MergeResult, PathConflict


def print_conflict_details(result: MergeResult) -> None:
    if result.conflicts:
        log_conflict("Overridden paths detected:")
        for conflict in result.conflicts:
            overridden = ", ".join(conflict.losers)
            log_conflict(f"{conflict.path}: {conflict.winner} (overrides {overridden})", indent=2)
    else:
        log_ok("No overlapping paths found.")
    if result.skipped_entries:
        log_warn("Unreadable entries skipped:")
        for skipped in result.skipped_entries:
            log_warn(f"{skipped.source}: {skipped.path} ({skipped.reason})", indent=2)


def _build_conflict_rows(conflicts: List[PathConflict]) -> List[List[str]]:
    return [
        [
            conflict.path,  # path
            conflict.winner,  # winner
            ", ".join(conflict.sources),  # all sources, in merge order
        ]
        for conflict in conflicts
    ]


def _build_pack_rows(result: MergeResult) -> List[List[Any]]:
    rows: List[List[Any]] = []
    for stats in result.source_stats:
        rows.append(
            [
                stats.index + 1,  # order
                stats.name,  # pack name
                stats.size,  # size in bytes
                stats.entries,  # entries read
                stats.kept,  # files kept
                stats.overridden,  # files overridden
            ]
        )
    return rows


def export_report(output_path: Path, result: MergeResult) -> None:
    """Write an Excel report describing where each merged file came from."""

    output_path.parent.mkdir(parents=True, exist_ok=True)

    workbook = Workbook()

    # Packs sheet
    packs_sheet = workbook.active
    if not packs_sheet:
        packs_sheet = workbook.create_sheet("packs")
    else:
        packs_sheet.title = "packs"
    packs_sheet.append(["order", "pack name", "size", "entries", "files kept", "files overridden"])
    for row in _build_pack_rows(result):
        packs_sheet.append(row)

    # Files sheet
    files_sheet = workbook.create_sheet("files")
    files_sheet.append(["path", "source"])
    for path in result.file_map_paths:
        files_sheet.append([path, result.origins.get(path, "")])

    # Conflicts sheet
    conflicts_sheet = workbook.create_sheet("conflicts")
    conflicts_sheet.append(["path", "winner", "all sources"])
    for row in _build_conflict_rows(result.conflicts):
        conflicts_sheet.append(row)

    # Skipped entries sheet
    skipped_sheet = workbook.create_sheet("skipped")
    skipped_sheet.append(["source", "path", "reason"])
    for skipped in result.skipped_entries:
        skipped_sheet.append([skipped.source, skipped.path, skipped.reason])

    workbook.save(output_path)
    workbook.close()


__all__ = ["print_conflict_details", "export_report"]
