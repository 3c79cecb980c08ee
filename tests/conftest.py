"""
Pytest configuration and shared fixtures for sqlmigrate tests.
"""

import pytest
import os
import tempfile
from pathlib import Path

# Add project root to path for imports
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlmigrate.db.sqlite_database import SQLiteDatabase
from sqlmigrate.migration import MigrationManager, SQLiteBackupManager


@pytest.fixture
def write_script():
    """Factory writing a migration script, creating the directory if needed."""
    def _write(directory: Path, name: str, content: str = "") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def site_path():
    """Temporary site root with an empty ``sql`` scripts directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(os.path.abspath(tmpdir))
        (root / "sql").mkdir()
        yield root


@pytest.fixture
def scripts_dir(site_path):
    """Scripts directory under the site root."""
    return site_path / "sql"


@pytest.fixture
def temp_path(site_path):
    """Snapshot directory for migration batches."""
    path = site_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def database(site_path):
    """File-backed SQLite database with a sentinel table."""
    db = SQLiteDatabase.open(site_path / "test.db")
    db.execute("CREATE TABLE sentinel (value TEXT)")
    db.execute("INSERT INTO sentinel (value) VALUES ('original')")
    yield db
    db.close()


@pytest.fixture
def backup_manager(database):
    """SQLite snapshot manager for the test database."""
    return SQLiteBackupManager(database)


@pytest.fixture
def manager(database, backup_manager, site_path, temp_path):
    """Migration manager wired to the test database."""
    return MigrationManager(
        database,
        backup_manager,
        site_path=site_path,
        temp_path=temp_path
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test."""
    import logging
    # Clear all handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    # Reset to WARNING level
    logging.root.setLevel(logging.WARNING)
    yield


# Pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (full migration batches against SQLite)"
    )
