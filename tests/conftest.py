"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sqlsend.environment import ExecutionResult
from sqlsend.router import SessionHandle


class FakeEnvironment:
    """In-memory stand-in for the host environment.

    Sessions are listed most recent first, as a real host would.
    """

    def __init__(self, sessions=None, tables=None):
        self.sessions = list(sessions or [])
        self.tables = tables or {}
        self.enumerate_calls = 0
        self.executed = []
        self.opened_views = []
        self.hosts = {}

    def add_session(self, label, surface=None):
        handle = SessionHandle(label=label, connection=object(), surface=surface)
        self.sessions.insert(0, handle)
        if surface is not None:
            self.hosts[handle] = surface
        return handle

    def enumerate_session_surfaces(self):
        self.enumerate_calls += 1
        return [(h.label, h) for h in self.sessions]

    def list_tables(self, handle):
        return set(self.tables.get(handle.label, set()))

    def execute(self, handle, sql):
        self.executed.append((handle, sql))
        return ExecutionResult(success=True, rowcount=0)

    def open_table_view(self, handle, table):
        self.opened_views.append((handle, table))

    def find_host_surface(self, handle):
        return self.hosts.get(handle)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    dir_path = tempfile.mkdtemp()
    yield dir_path
    # Cleanup
    import shutil
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def fake_env():
    """Environment with no live sessions."""
    return FakeEnvironment()


@pytest.fixture
def mock_config():
    """Create a mock configuration object."""
    config = MagicMock()
    config.router.persist_implicit = False
    config.router.default_unit = "statement"
    config.ui.use_colors = False
    config.ui.echo_sql = True
    config.ui.show_technical_details = False
    config.ui.max_rows = 50
    config.logging.enabled = False
    config.logging.level = "info"
    config.history.max_entries = 200
    return config


@pytest.fixture
def isolated_config(temp_dir, monkeypatch):
    """Set up isolated configuration for testing."""
    config_dir = Path(temp_dir) / ".config" / "sqlsend"
    config_dir.mkdir(parents=True)

    monkeypatch.setenv("HOME", temp_dir)
    for key in ("SQLSEND_DEBUG", "SQLSEND_PERSIST_IMPLICIT", "SQLSEND_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)

    from sqlsend.config import reset_config
    reset_config()
    yield config_dir
    reset_config()


# Markers for slow tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
