"""
Unit tests for the migration ledger.
"""

import pytest
from unittest.mock import Mock

from sqlmigrate.db.base_database import DatabaseError
from sqlmigrate.migration.base_migration import (
    ConfigurationError,
    StorageError,
    DuplicateKeyError
)
from sqlmigrate.migration.ledger import Ledger


@pytest.mark.unit
class TestLedger:
    """Tests for ledger table management."""

    def test_ensure_installed_creates_table(self, database):
        """Test the ledger table is created on first use."""
        ledger = Ledger(database)

        ledger.ensure_installed()

        assert database.table_exists("migration")

    def test_ensure_installed_is_idempotent(self, database):
        """Test installing twice keeps existing entries."""
        ledger = Ledger(database)
        ledger.ensure_installed()
        ledger.record("sql/001.sql")

        ledger.ensure_installed()

        assert ledger.has("sql/001.sql")

    def test_custom_table_name(self, database):
        """Test the ledger table name is configurable."""
        ledger = Ledger(database, table="schema_scripts")
        ledger.ensure_installed()

        assert database.table_exists("schema_scripts")
        assert not database.table_exists("migration")

    def test_empty_table_name_rejected(self, database):
        """Test an empty table name is a configuration error."""
        with pytest.raises(ConfigurationError):
            Ledger(database, table="")

    def test_record_and_has(self, database):
        """Test recorded keys are reported as applied."""
        ledger = Ledger(database)
        ledger.ensure_installed()

        assert not ledger.has("sql/001.sql")
        ledger.record("sql/001.sql")

        assert ledger.has("sql/001.sql")
        assert not ledger.has("sql/002.sql")

    def test_record_sets_timestamp(self, database):
        """Test every entry carries the time it was applied."""
        ledger = Ledger(database)
        ledger.ensure_installed()
        ledger.record("sql/001.sql")

        entries = ledger.entries()

        assert len(entries) == 1
        assert entries[0].path == "sql/001.sql"
        assert entries[0].applied_at not in ("", "None")

    def test_duplicate_record_is_hard_failure(self, database):
        """Test recording the same key twice raises DuplicateKeyError."""
        ledger = Ledger(database)
        ledger.ensure_installed()
        ledger.record("sql/001.sql")

        with pytest.raises(DuplicateKeyError) as exc_info:
            ledger.record("sql/001.sql")

        assert isinstance(exc_info.value, StorageError)
        assert exc_info.value.key == "sql/001.sql"

    def test_key_with_quote(self, database):
        """Test keys containing quotes are stored verbatim."""
        ledger = Ledger(database)
        ledger.ensure_installed()

        ledger.record("sql/o'brien.sql")

        assert ledger.has("sql/o'brien.sql")

    def test_forget_removes_entry(self, database):
        """Test forget lets a key be applied again."""
        ledger = Ledger(database)
        ledger.ensure_installed()
        ledger.record("sql/001.sql")

        assert ledger.forget("sql/001.sql") is True
        assert not ledger.has("sql/001.sql")
        assert ledger.forget("sql/001.sql") is False

    def test_entries_ordered_by_path(self, database):
        """Test entries are listed by key."""
        ledger = Ledger(database)
        ledger.ensure_installed()
        ledger.record("sql/b.sql")
        ledger.record("sql/a.sql")

        assert [e.path for e in ledger.entries()] == ["sql/a.sql", "sql/b.sql"]

    def test_ddl_failure_is_storage_error(self):
        """Test a rejected CREATE TABLE surfaces as StorageError."""
        database = Mock()
        database.quote_identifier.return_value = '"migration"'
        database.table_exists.return_value = False
        database.execute.side_effect = DatabaseError("permission denied")

        with pytest.raises(StorageError):
            Ledger(database).ensure_installed()

    def test_query_failure_is_storage_error(self):
        """Test a failing lookup surfaces as StorageError."""
        database = Mock()
        database.quote_identifier.return_value = '"migration"'
        database.query.side_effect = DatabaseError("no such table")

        with pytest.raises(StorageError):
            Ledger(database).has("sql/001.sql")
