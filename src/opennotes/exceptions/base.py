"""Root of the OpenNotes exception hierarchy."""

from typing import Dict, Optional


class OpenNotesError(Exception):
    """Base exception for all OpenNotes errors.

    ``message`` is the one-line summary shown to users. ``details`` carries
    the context needed to act on it, such as the offending ``path``, the
    rejected ``query`` or the underlying ``reason``. The CLI prints both, as
    ``message (key=value, ...)``.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
