"""
Logging configuration for OpenNotes.

Provides structured logging with rich formatting for terminal output.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_LEVEL_NAMES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def level_from_env() -> Optional[int]:
    """
    Read the log level requested through the environment.

    ``DEBUG`` set to any value wins; otherwise ``LOG_LEVEL`` is matched
    against debug/info/warn/warning/error. Unknown values are ignored.

    Returns:
        A logging level, or None when the environment is silent
    """
    if os.environ.get("DEBUG"):
        return logging.DEBUG
    name = os.environ.get("LOG_LEVEL", "").strip().lower()
    return _LEVEL_NAMES.get(name)


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance for opennotes
    """
    env_level = level_from_env()
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    elif env_level is not None:
        level = env_level
    else:
        level = logging.WARNING

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=level == logging.DEBUG,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger("opennotes")
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'opennotes.notebook.store')
              If None, returns the root opennotes logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("opennotes")

    if not name.startswith("opennotes"):
        name = f"opennotes.{name}"

    return logging.getLogger(name)
