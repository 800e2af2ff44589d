"""Shared test fixtures for OpenNotes."""

import pytest

from opennotes.config import CONFIG_ENV_VAR, NOTEBOOK_PATH_ENV_VAR, ConfigService
from opennotes.notebook import NotebookService, NotebookStore
from opennotes.query.database import DbService


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests (these install the markdown extension)",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the global config at a temp file and clear env overrides."""
    config_file = tmp_path / "global" / "config.json"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
    monkeypatch.delenv(NOTEBOOK_PATH_ENV_VAR, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return config_file


@pytest.fixture
def config_service(isolated_env):
    """Global config service backed by a temp file."""
    return ConfigService.load(isolated_env)


@pytest.fixture
def store(config_service):
    return NotebookStore(config_service)


@pytest.fixture
def db():
    """Database service without extensions (no network access needed)."""
    service = DbService(extensions=())
    yield service
    service.close()


@pytest.fixture
def notebook_service(config_service, store, db):
    return NotebookService(config_service, store, db)


@pytest.fixture
def workspace(tmp_path):
    """Directory tree for notebooks, separate from the global config dir."""
    path = tmp_path / "work"
    path.mkdir()
    return path
