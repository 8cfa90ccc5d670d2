from __future__ import annotations

import toml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .errors import ConfigError
from .logging_utils import log_warn
from .models import DEFAULT_DESCRIPTION, DEFAULT_PACK_FORMAT, DEFAULT_PACK_NAME

DEFAULT_CONFIG_NAME = "merger.toml"
DEFAULT_MAX_INPUT_MB = 75
DEFAULT_COMPRESSION_LEVEL = 6


@dataclass(slots=True)
class MergeConfig:
    pack_name: str = DEFAULT_PACK_NAME
    description: str = DEFAULT_DESCRIPTION
    icon: Path | None = None
    pack_format: int = DEFAULT_PACK_FORMAT
    packs: List[Path] = field(default_factory=list)
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    max_input_mb: float = DEFAULT_MAX_INPUT_MB
    workers: int = 1

    @property
    def max_input_bytes(self) -> int:
        return int(self.max_input_mb * 1024 * 1024)


def _section(config: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
    section = config.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table in {config_path}")
    return section


def _typed(section: Dict[str, Any], key: str, expected: type | tuple, default: Any, config_path: Path) -> Any:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ConfigError(f"'{key}' has an invalid value {value!r} in {config_path}")
    return value


def load_merge_config(config_path: Path) -> MergeConfig:
    """Load pack metadata and merge options from a TOML file.

    Relative ``icon`` and ``packs`` paths are resolved against the directory
    holding the configuration file. A missing file yields the defaults.
    """

    if not config_path.exists():
        log_warn(f"Config file {config_path} not found. Proceeding with defaults.")
        return MergeConfig()

    raw_text = config_path.read_text(encoding="utf-8")
    try:
        config = toml.loads(raw_text)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Invalid TOML in config file: {config_path}") from exc

    base_dir = config_path.parent
    pack = _section(config, "pack", config_path)
    merge = _section(config, "merge", config_path)

    icon_value = _typed(pack, "icon", (str, type(None)), None, config_path)
    pack_values = _typed(merge, "packs", list, [], config_path)
    for value in pack_values:
        if not isinstance(value, str):
            raise ConfigError(f"'packs' entries must be strings, got {value!r} in {config_path}")

    return MergeConfig(
        pack_name=_typed(pack, "name", str, DEFAULT_PACK_NAME, config_path),
        description=_typed(pack, "description", str, DEFAULT_DESCRIPTION, config_path),
        icon=base_dir / icon_value if icon_value else None,
        pack_format=_typed(pack, "pack_format", int, DEFAULT_PACK_FORMAT, config_path),
        packs=[base_dir / value for value in pack_values],
        compression_level=_typed(merge, "compression_level", int, DEFAULT_COMPRESSION_LEVEL, config_path),
        max_input_mb=_typed(merge, "max_input_mb", (int, float), DEFAULT_MAX_INPUT_MB, config_path),
        workers=_typed(merge, "workers", int, 1, config_path),
    )
