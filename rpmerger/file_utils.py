from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Set, Tuple

from .logging_utils import log_error, log_info, log_warn
from .models import PackInput
from .text_utils import format_file_size

ConfirmCallback = Callable[[Path, int], bool]


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def backup_file(source: Path) -> Path:
    if not source.exists():
        raise FileNotFoundError(f"Cannot backup missing file: {source}")
    destination = source.with_name(source.name + ".bak")
    shutil.copy2(source, destination)
    log_info(f"Created backup: {destination}")
    return destination


def discover_pack_archives(paths: Iterable[Path]) -> List[Path]:
    """Expand directories into the zip files they hold, keeping argument order."""

    discovered: List[Path] = []
    for path in paths:
        if path.is_dir():
            discovered.extend(
                sorted(child for child in path.iterdir() if child.is_file() and child.suffix.lower() == ".zip")
            )
        else:
            discovered.append(path)
    return discovered


def collect_pack_inputs(
    paths: Iterable[Path],
    max_input_bytes: int,
    confirm_large: ConfirmCallback | None = None,
) -> List[PackInput]:
    """Read pack archives from disk, applying the collaborator-side input rules.

    Non-zip files and missing paths are rejected, the same file (name and size)
    is only added once, and files above ``max_input_bytes`` are only kept when
    ``confirm_large`` approves them.
    """

    inputs: List[PackInput] = []
    seen: Set[Tuple[str, int]] = set()
    for path in paths:
        if path.suffix.lower() != ".zip":
            log_error(f"Only .zip files are supported! Skipped: {path}")
            continue
        if not path.is_file():
            log_error(f"Pack file not found: {path}")
            continue

        size = path.stat().st_size
        key = (path.name, size)
        if key in seen:
            log_warn(f"File already added! Skipped: {path}")
            continue

        if size > max_input_bytes:
            approved = confirm_large(path, size) if confirm_large else False
            if not approved:
                log_warn(
                    f"Skipped {path.name}: {format_file_size(size)} exceeds "
                    f"the {format_file_size(max_input_bytes)} limit."
                )
                continue

        seen.add(key)
        inputs.append(PackInput(name=path.name, data=path.read_bytes()))
        log_info(f"Added: {path.name} ({format_file_size(size)})", indent=2)
    return inputs


def read_icon(icon_path: Path | None) -> bytes | None:
    if icon_path is None:
        return None
    if not icon_path.is_file():
        log_warn(f"Icon file {icon_path} not found. Merging without a custom icon.")
        return None
    return icon_path.read_bytes()


def resolve_output_path(output: Path, suggested_filename: str) -> Path:
    if output.is_dir() or output.suffix.lower() != ".zip":
        return output / suggested_filename
    return output


def write_output(output_path: Path, archive_bytes: bytes) -> Path:
    ensure_directory(output_path.parent)
    if output_path.exists():
        backup_file(output_path)
    output_path.write_bytes(archive_bytes)
    return output_path
