"""Notebook configuration types.

``StoredNotebookConfig`` is what lives in ``.opennotes.json``: ``root`` is
relative to the file's directory. ``NotebookConfig`` is the resolved
in-memory form with an absolute ``root`` and the config file ``path``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import InvalidConfigError

if TYPE_CHECKING:
    from ..notes import NoteService

DEFAULT_GROUP_NAME = "Default"
DEFAULT_GROUP_GLOBS = ["**/*.md"]


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidConfigError(key, value, "expected a list of strings")
    return list(value)


@dataclass
class NotebookGroup:
    """A named subset of notes selected by globs, with shared metadata."""

    name: str
    globs: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    template: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "globs": list(self.globs),
            "metadata": dict(self.metadata),
        }
        if self.template:
            data["template"] = self.template
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotebookGroup:
        if not isinstance(data, dict):
            raise InvalidConfigError("groups", data, "expected an object")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise InvalidConfigError("groups.metadata", metadata, "expected an object")
        return cls(
            name=str(data.get("name", "")),
            globs=_string_list(data, "globs"),
            metadata=metadata,
            template=str(data.get("template") or ""),
        )

    @classmethod
    def default(cls) -> NotebookGroup:
        return cls(name=DEFAULT_GROUP_NAME, globs=list(DEFAULT_GROUP_GLOBS))


@dataclass
class StoredNotebookConfig:
    """On-disk notebook config."""

    root: str
    name: str
    contexts: list[str] = field(default_factory=list)
    templates: dict[str, str] = field(default_factory=dict)
    groups: list[NotebookGroup] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"root": self.root, "name": self.name}
        if self.contexts:
            data["contexts"] = list(self.contexts)
        if self.templates:
            data["templates"] = dict(self.templates)
        if self.groups:
            data["groups"] = [g.to_dict() for g in self.groups]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredNotebookConfig:
        if not isinstance(data, dict):
            raise InvalidConfigError("config", type(data).__name__, "expected a JSON object")

        templates = data.get("templates") or {}
        if not isinstance(templates, dict) or not all(
            isinstance(v, str) for v in templates.values()
        ):
            raise InvalidConfigError("templates", templates, "expected a mapping of strings")

        groups = data.get("groups") or []
        if not isinstance(groups, list):
            raise InvalidConfigError("groups", groups, "expected a list")

        return cls(
            root=str(data.get("root") or "."),
            name=str(data.get("name", "")),
            contexts=_string_list(data, "contexts"),
            templates=dict(templates),
            groups=[NotebookGroup.from_dict(g) for g in groups],
        )


@dataclass
class NotebookConfig(StoredNotebookConfig):
    """Resolved notebook config.

    Attributes:
        root: Absolute notes directory
        path: Absolute path of the backing ``.opennotes.json`` (not persisted)
    """

    path: str = ""


@dataclass
class Notebook:
    """A loaded notebook: its resolved config and a note service on its root."""

    config: NotebookConfig
    notes: NoteService

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def directory(self) -> str:
        """Directory holding the config file."""
        return str(Path(self.config.path).parent)

    def match_context(self, path: str) -> Optional[str]:
        """Return the first context that is a string prefix of ``path``.

        Matching is by raw string prefix: ``/a/proj`` also matches
        ``/a/project``. Empty contexts never match.
        """
        for context in self.config.contexts:
            if context and path.startswith(context):
                return context
        return None
