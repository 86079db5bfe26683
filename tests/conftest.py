"""
Pytest configuration and fixtures for table editor tests.
Provides a users table snapshot, session helpers and a mock backend.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tabledit.config import EditorConfig
from tabledit.session import GridSnapshot, TableSession

USERS_COLUMNS = ["id", "name", "age"]
USERS_ROWS = [
    [5, "Bob", 41],
    [6, "Carol", None],
    [7, "Dave", 30],
]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "property: hypothesis property-based tests")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def clean_editor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep editor settings from the developer's shell out of the tests."""
    for key in (
        "TABLEDIT_PAGE_SIZE",
        "LOG_LEVEL",
        "LOG_FILE",
        "LOG_JSON",
        "OTLP_ENDPOINT",
        "TRACE_CONSOLE",
        "METRICS_PORT",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def editor_config() -> EditorConfig:
    return EditorConfig(page_size=3)


@pytest.fixture
def users_snapshot() -> GridSnapshot:
    """users(id PK, name, age) with three loaded rows."""
    return GridSnapshot(columns=USERS_COLUMNS, rows=USERS_ROWS, total_count=7)


@pytest.fixture
def mock_backend(users_snapshot: GridSnapshot) -> MagicMock:
    """Backend whose table methods serve the users snapshot."""
    backend = MagicMock()
    backend.get_table_structure.return_value = {
        "columns": [
            {"name": "id", "data_type": "integer", "is_primary_key": True},
            {"name": "name", "data_type": "text", "is_primary_key": False},
            {"name": "age", "data_type": "integer", "is_primary_key": False},
        ]
    }
    backend.get_table_data.return_value = {
        "columns": list(USERS_COLUMNS),
        "rows": [list(row) for row in USERS_ROWS],
        "execution_time_ms": 1.5,
    }
    backend.get_table_count.return_value = 7
    backend.execute_mutations.return_value = None
    return backend


@pytest.fixture
def users_session(mock_backend: MagicMock, editor_config: EditorConfig) -> TableSession:
    """Opened session on the users table."""
    session = TableSession("users", "local", backend=mock_backend, config=editor_config)
    session.open()
    return session
