"""Configuration and notebook exceptions: lookup, parsing, filesystem access."""

from pathlib import Path
from typing import Any, Union

from .base import OpenNotesError

PathLike = Union[str, Path]


class ConfigurationError(OpenNotesError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidNotebookConfigError(ConfigurationError):
    """Raised when a notebook config file cannot be parsed."""

    def __init__(self, path: PathLike, reason: str):
        super().__init__(
            f"Invalid notebook config: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = Path(path)
        self.reason = reason


class NotebookNotFoundError(OpenNotesError):
    """Raised when an explicit notebook path holds no notebook."""

    def __init__(self, path: PathLike):
        super().__init__(f"No notebook found at {path}", details={"path": str(path)})
        self.path = Path(path)


class NotebookIOError(OpenNotesError):
    """Raised when reading or writing notebook files fails."""

    def __init__(self, path: PathLike, reason: str):
        super().__init__(
            f"Cannot access {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = Path(path)
        self.reason = reason


class InvalidNoteNameError(OpenNotesError):
    """Raised when a note filename fails validation."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid note name: {name}", details={"reason": reason})
        self.name = name
        self.reason = reason
