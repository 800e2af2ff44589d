"""
Input validation for notebook and note names.

Names reach the filesystem, so they are checked before any path is built.
"""

import os
import re

from .exceptions import InvalidConfigError, InvalidNoteNameError

MAX_NOTEBOOK_NAME_LENGTH = 100
MAX_NOTE_NAME_LENGTH = 255

_NOTEBOOK_NAME = re.compile(r"^[a-zA-Z0-9\s\-_]+$")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")


def validate_notebook_name(name: str) -> None:
    """
    Validate a notebook display name.

    Args:
        name: Proposed notebook name

    Raises:
        InvalidConfigError: If the name is empty, too long, or has other characters
            than letters, digits, spaces, hyphens and underscores
    """
    if not name:
        raise InvalidConfigError("name", name, "notebook name is required")

    if len(name) > MAX_NOTEBOOK_NAME_LENGTH:
        raise InvalidConfigError(
            "name", name, f"notebook name must be between 1 and {MAX_NOTEBOOK_NAME_LENGTH} characters"
        )

    if not _NOTEBOOK_NAME.match(name):
        raise InvalidConfigError(
            "name",
            name,
            "notebook name can only contain letters, numbers, spaces, hyphens, and underscores",
        )


def validate_path(path: str) -> None:
    """
    Validate a user-supplied filesystem path. Empty means "use the default".

    Raises:
        InvalidConfigError: If the path contains control characters
    """
    if not path:
        return

    if _CONTROL_CHARS.search(path):
        raise InvalidConfigError("path", repr(path), "path contains invalid characters")


def validate_note_name(name: str) -> None:
    """
    Validate a note filename (with or without the .md extension).

    Raises:
        InvalidNoteNameError: If the name is empty, too long, absolute, or traverses
            directories
    """
    if not name:
        raise InvalidNoteNameError(name, "note name is required")

    stem = name[:-3] if name.endswith(".md") else name

    if len(stem) > MAX_NOTE_NAME_LENGTH:
        raise InvalidNoteNameError(name, f"note name is too long (max {MAX_NOTE_NAME_LENGTH} characters)")

    if os.path.isabs(name) or name.startswith("~"):
        raise InvalidNoteNameError(name, "note name must be relative to the notebook")

    if ".." in stem:
        raise InvalidNoteNameError(name, "note name cannot contain path traversal (..)")


def resolve_note_path(root: str, name: str) -> str:
    """
    Validate ``name`` and join it onto the notebook ``root``.

    The result, with symlinks resolved, must stay inside ``root``.

    Raises:
        InvalidNoteNameError: If the name is invalid or escapes the notebook
    """
    validate_note_name(name)

    note_path = os.path.abspath(os.path.join(root, name))
    real_root = os.path.realpath(root)
    if os.path.commonpath([real_root, os.path.realpath(note_path)]) != real_root:
        raise InvalidNoteNameError(name, "note path is outside the notebook")
    return note_path
