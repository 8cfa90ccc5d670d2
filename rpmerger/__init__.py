"""Core package for the resource pack merger."""

from .archive_loader import PACK_ICON_FILE, PACK_METADATA_FILE, RESERVED_FILES, SourceArchive
from .conflict_detector import OriginTracker, detect_path_conflicts
from .errors import ConfigError, EntryDecodeError, InputFormatError, MergeError, ValidationError
from .load_config import MergeConfig, load_merge_config
from .merge_engine import PLACEHOLDER_ICON, build_pack_mcmeta, is_custom_icon, merge_packs, suggest_filename
from .models import MergePhase, MergeResult, PackInput, PackMetadata, PathConflict, SkippedEntry
from .report import export_report, print_conflict_details
from .file_utils import collect_pack_inputs, discover_pack_archives, write_output

__all__ = [
    "ConfigError",
    "EntryDecodeError",
    "InputFormatError",
    "MergeError",
    "ValidationError",
    "MergeConfig",
    "MergePhase",
    "MergeResult",
    "PackInput",
    "PackMetadata",
    "PathConflict",
    "SkippedEntry",
    "SourceArchive",
    "OriginTracker",
    "PACK_ICON_FILE",
    "PACK_METADATA_FILE",
    "RESERVED_FILES",
    "PLACEHOLDER_ICON",
    "load_merge_config",
    "merge_packs",
    "build_pack_mcmeta",
    "is_custom_icon",
    "suggest_filename",
    "detect_path_conflicts",
    "collect_pack_inputs",
    "discover_pack_archives",
    "write_output",
    "print_conflict_details",
    "export_report",
]
