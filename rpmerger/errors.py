from __future__ import annotations


class MergeError(Exception):
    """Base class for every failure raised by the merger."""


class InputFormatError(MergeError, IOError):
    def __init__(self, index: int, source: str, detail: str = "") -> None:
        self.index = index
        self.source = source
        message = f"Input #{index + 1} ({source}) is not a valid zip archive"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EntryDecodeError(MergeError):
    def __init__(self, source: str, path: str, reason: str) -> None:
        self.source = source
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read '{path}' from {source}: {reason}")


class ValidationError(MergeError, ValueError):
    pass


class ConfigError(MergeError, ValueError):
    pass
