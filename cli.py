from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Sequence

from rpmerger import (
    MergeError,
    MergePhase,
    PackMetadata,
    collect_pack_inputs,
    discover_pack_archives,
    export_report,
    load_merge_config,
    merge_packs,
    print_conflict_details,
    write_output,
)
from rpmerger.file_utils import read_icon, resolve_output_path
from rpmerger.load_config import DEFAULT_CONFIG_NAME
from rpmerger.logging_utils import log_error, log_info, log_ok, log_progress, log_warn, set_quiet
from rpmerger.text_utils import format_file_size


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Merge several Minecraft resource packs into one. "
            "When packs contain the same file, the pack listed last wins."
        )
    )
    parser.add_argument(
        "packs",
        nargs="*",
        type=Path,
        help="Resource pack zip files (or directories of them) in merge order.",
    )
    parser.add_argument("--name", default=None, help="Name of the merged pack.")
    parser.add_argument("--description", default=None, help="Description written to pack.mcmeta.")
    parser.add_argument("--icon", type=Path, default=None, help="PNG file used as pack.png.")
    parser.add_argument(
        "--pack-format",
        type=int,
        default=None,
        help="pack_format value written to pack.mcmeta.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("."),
        help="Output zip path, or a directory that receives <PackName>.zip.",
    )
    parser.add_argument(
        "--config-path",
        type=Path,
        default=Path(DEFAULT_CONFIG_NAME),
        help="Path to the merger configuration TOML file.",
    )
    parser.add_argument(
        "--export-path",
        type=Path,
        default=Path(""),
        help="Path to save the merge report Excel file.",
    )
    parser.add_argument(
        "--verbose-conflict",
        action="store_true",
        default=False,
        help="Print every overridden path and the pack it was taken from.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Merge and report, but do not write the output archive.",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        default=False,
        help="Accept packs above the size limit without asking.",
    )
    parser.add_argument("--compression-level", type=int, default=None, help="Deflate level, 0-9.")
    parser.add_argument("--workers", type=int, default=None, help="Threads used to decode entries.")
    parser.add_argument("--max-size-mb", type=float, default=None, help="Soft size limit per pack.")
    parser.add_argument(
        "--quiet",
        action="store_true",
        default=False,
        help="Only print warnings and errors.",
    )
    return parser.parse_args(argv)


def _confirm_large(path: Path, size: int) -> bool:
    try:
        answer = input(f"{path.name} is {format_file_size(size)}, which may slow the merge. Continue? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _report_progress():
    last_phase: List[MergePhase] = []

    def report(phase: MergePhase, percent: float) -> None:
        if last_phase and last_phase[-1] == phase:
            return
        last_phase.append(phase)
        log_progress(phase.value, percent)

    return report


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    set_quiet(args.quiet)
    config = load_merge_config(args.config_path.expanduser())

    if args.max_size_mb is not None:
        config.max_input_mb = args.max_size_mb
    pack_paths = discover_pack_archives([*config.packs, *(path.expanduser() for path in args.packs)])
    if not pack_paths:
        raise SystemExit("Please add at least one resource pack!")

    log_info(f"Reading {len(pack_paths)} pack file(s)...")
    inputs = collect_pack_inputs(
        pack_paths,
        max_input_bytes=config.max_input_bytes,
        confirm_large=(lambda path, size: True) if args.yes else _confirm_large,
    )

    icon_path = args.icon.expanduser() if args.icon else config.icon
    metadata = PackMetadata(
        name=args.name if args.name is not None else config.pack_name,
        description=args.description if args.description is not None else config.description,
        format_version=args.pack_format if args.pack_format is not None else config.pack_format,
        icon_bytes=read_icon(icon_path),
    )

    try:
        result = merge_packs(
            inputs,
            metadata,
            progress=_report_progress(),
            compression_level=(
                args.compression_level if args.compression_level is not None else config.compression_level
            ),
            max_workers=args.workers if args.workers is not None else config.workers,
        )
    except MergeError as exc:
        log_error(str(exc))
        raise SystemExit("Merge failed. Please try again.") from exc

    log_info("Files per pack:")
    for stats in result.source_stats:
        log_info(f"{stats.name}: {stats.entries} files, {stats.overridden} overridden", indent=2)

    if args.verbose_conflict:
        print_conflict_details(result)
    elif result.skipped_entries:
        log_warn(f"{len(result.skipped_entries)} unreadable entries were skipped. Use --verbose-conflict for details.")

    export_path = args.export_path
    if not export_path == Path(""):
        if export_path.suffix.lower() != ".xlsx":
            export_path = export_path / "merge_report.xlsx"
        export_report(export_path, result)
        log_info(f"Report saved to {export_path}")

    output_path = resolve_output_path(args.output.expanduser(), result.filename)
    if args.dry_run:
        log_info(f"Dry run active. {output_path} was not written ({format_file_size(result.size)}).")
        return

    write_output(output_path, result.archive_bytes)
    log_ok(f"Resource pack merged successfully: {output_path} ({format_file_size(result.size)})")


if __name__ == "__main__":
    main()
