from __future__ import annotations

import re

NON_ALNUM_PATTERN = re.compile(r"[^A-Za-z0-9]")
SIZE_UNITS = ("B", "KB", "MB", "GB")


def sanitize_pack_name(raw: str | None) -> str:
    return NON_ALNUM_PATTERN.sub("", raw or "")


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    value = round(value, 2)
    if value == int(value):
        return f"{int(value)} {SIZE_UNITS[unit]}"
    return f"{value} {SIZE_UNITS[unit]}"
