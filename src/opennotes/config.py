"""Global configuration and notebook registry for OpenNotes.

The global config file holds the list of registered notebook directories and
an optional declared active notebook. The declared notebook is resolved in
priority order:
    1. Environment variable (OPENNOTES_NOTEBOOK_PATH)
    2. Global config file ($OPENNOTES_CONFIG, else the user config directory)
    3. Defaults (none)

The environment value is never written back; the file keeps its own value.

Example:
    >>> service = ConfigService.load()
    >>> service.register("/home/me/notes")
    True
    >>> service.store.notebooks
    ['/home/me/notes']
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import InvalidConfigError, NotebookIOError
from .logging_config import get_logger

logger = get_logger(__name__)

APP_NAME = "opennotes"
CONFIG_ENV_VAR = "OPENNOTES_CONFIG"
NOTEBOOK_PATH_ENV_VAR = "OPENNOTES_NOTEBOOK_PATH"

# Per-notebook config file name, stored in the notebook directory.
NOTEBOOK_CONFIG_FILE = ".opennotes.json"


def global_config_file() -> Path:
    """Return the global config file path.

    ``$OPENNOTES_CONFIG`` wins; otherwise ``$XDG_CONFIG_HOME/opennotes`` or
    ``~/.config/opennotes`` holds ``config.json``.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()

    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME / "config.json"


@dataclass
class GlobalConfig:
    """Contents of the global config file.

    Attributes:
        notebooks: Registered notebook directories, in registration order
        notebook_path: Declared active notebook directory, if any
    """

    notebooks: list[str] = field(default_factory=list)
    notebook_path: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"notebooks": list(self.notebooks)}
        if self.notebook_path:
            data["notebookPath"] = self.notebook_path
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GlobalConfig:
        notebooks = data.get("notebooks") or []
        if not isinstance(notebooks, list) or not all(isinstance(p, str) for p in notebooks):
            raise InvalidConfigError("notebooks", notebooks, "expected a list of paths")

        notebook_path = data.get("notebookPath")
        if notebook_path is not None and not isinstance(notebook_path, str):
            raise InvalidConfigError("notebookPath", notebook_path, "expected a path")

        # Registry has set semantics; drop duplicates from hand-edited files.
        unique: list[str] = []
        for path in notebooks:
            if path not in unique:
                unique.append(path)

        return cls(notebooks=unique, notebook_path=notebook_path or None)


def load_global_config(config_file: Optional[Path] = None) -> GlobalConfig:
    """Load the global config file as stored.

    A missing file yields the defaults. Environment overrides are not applied
    here; see :attr:`ConfigService.declared_path`.

    Args:
        config_file: Explicit config file path (defaults to global_config_file())

    Returns:
        GlobalConfig instance

    Raises:
        InvalidConfigError: If the file exists but is not a valid config
    """
    path = config_file or global_config_file()
    config = GlobalConfig()

    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise InvalidConfigError(str(path), "<unparseable>", f"invalid JSON: {e}")
        except OSError as e:
            raise NotebookIOError(path, str(e))
        if not isinstance(raw, dict):
            raise InvalidConfigError(str(path), type(raw).__name__, "expected a JSON object")
        config = GlobalConfig.from_dict(raw)
        logger.debug("Loaded global config from %s", path)
    else:
        logger.debug("No global config at %s, using defaults", path)

    return config


class ConfigService:
    """Owns the global config: the loaded ``store`` plus persistence.

    Thread-safe for in-process writers; cross-process writers are not
    coordinated.
    """

    def __init__(
        self,
        store: GlobalConfig,
        config_file: Path,
        env_notebook_path: Optional[str] = None,
    ) -> None:
        self.store = store
        self.config_file = config_file
        self.env_notebook_path = env_notebook_path or None
        self._lock = threading.Lock()

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> ConfigService:
        path = config_file or global_config_file()
        return cls(load_global_config(path), path, os.environ.get(NOTEBOOK_PATH_ENV_VAR))

    @property
    def declared_path(self) -> Optional[str]:
        """Active notebook: ``$OPENNOTES_NOTEBOOK_PATH``, else the file's ``notebookPath``."""
        return self.env_notebook_path or self.store.notebook_path

    def write(self, config: Optional[GlobalConfig] = None) -> None:
        """Persist ``config`` (defaults to the current store)."""
        if config is not None:
            self.store = config

        with self._lock:
            data = self.store.to_dict()

            try:
                self.config_file.parent.mkdir(parents=True, exist_ok=True)
                self.config_file.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            except OSError as e:
                raise NotebookIOError(self.config_file, str(e))

        logger.debug("Global config written to %s", self.config_file)

    def register(self, notebook_dir: str) -> bool:
        """Add ``notebook_dir`` to the registry and persist it.

        Returns False (without writing) when it is already registered.
        """
        with self._lock:
            if notebook_dir in self.store.notebooks:
                return False
            self.store.notebooks.append(notebook_dir)

        self.write()
        logger.info("Registered notebook %s", notebook_dir)
        return True
