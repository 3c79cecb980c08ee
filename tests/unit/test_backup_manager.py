"""
Unit tests for SQLite snapshots.
"""

import sqlite3
import pytest
from datetime import datetime
from unittest.mock import Mock

from sqlmigrate.migration.backup_manager import SQLiteBackupManager, Snapshot
from sqlmigrate.migration.base_migration import BackupError


@pytest.mark.unit
class TestSQLiteBackupManager:
    """Tests for save / restore / discard."""

    def test_save_creates_verified_snapshot(self, backup_manager, temp_path):
        """Test a snapshot file is written to the temp directory."""
        snapshot = backup_manager.save(temp_path)

        assert snapshot.path.parent == temp_path
        assert snapshot.path.exists()
        assert backup_manager.verify_backup(snapshot.path)

    def test_save_creates_missing_temp_dir(self, backup_manager, temp_path):
        """Test the temp directory is created on demand."""
        snapshot = backup_manager.save(temp_path / "nested" / "dir")

        assert snapshot.path.exists()

    def test_restore_undoes_changes(self, backup_manager, database, temp_path):
        """Test restoring brings back the exact pre-snapshot state."""
        snapshot = backup_manager.save(temp_path)
        database.execute("INSERT INTO sentinel (value) VALUES ('changed')")
        database.execute("CREATE TABLE added (id INTEGER)")

        backup_manager.restore(snapshot)

        assert database.query("SELECT value FROM sentinel") == [("original",)]
        assert not database.table_exists("added")

    def test_restore_discards_open_transaction(self, backup_manager, database, temp_path):
        """Test an uncommitted transaction on the live connection does not block restore."""
        snapshot = backup_manager.save(temp_path)
        database.connection.execute("INSERT INTO sentinel (value) VALUES ('uncommitted')")

        backup_manager.restore(snapshot)

        assert database.query("SELECT value FROM sentinel") == [("original",)]

    def test_discard_removes_file(self, backup_manager, temp_path):
        """Test discard deletes the snapshot."""
        snapshot = backup_manager.save(temp_path)

        backup_manager.discard(snapshot)

        assert not snapshot.path.exists()

    def test_restore_missing_snapshot_raises(self, backup_manager, temp_path):
        """Test restoring a vanished snapshot is a BackupError."""
        snapshot = Snapshot(path=temp_path / "gone.db", created_at=datetime.now())

        with pytest.raises(BackupError) as exc_info:
            backup_manager.restore(snapshot)

        assert exc_info.value.snapshot_path == snapshot.path

    def test_save_failure_raises_backup_error(self, temp_path):
        """Test a failing backup call is reported as BackupError and leaves no file."""
        database = Mock()
        database.connection.backup.side_effect = sqlite3.OperationalError("disk full")
        manager = SQLiteBackupManager(database)

        with pytest.raises(BackupError):
            manager.save(temp_path)

        assert list(temp_path.iterdir()) == []

    def test_verify_rejects_garbage(self, backup_manager, temp_path):
        """Test a non-database file fails verification."""
        garbage = temp_path / "garbage.db"
        garbage.write_bytes(b"not a database at all" * 100)

        assert backup_manager.verify_backup(garbage) is False

    def test_list_backups(self, backup_manager, temp_path):
        """Test leftover snapshots are listed newest first."""
        first = backup_manager.save(temp_path)
        second = backup_manager.save(temp_path)
        (temp_path / "unrelated.txt").write_text("x")

        listed = [b['path'] for b in backup_manager.list_backups(temp_path)]

        assert listed == [second.path, first.path]

    def test_list_backups_missing_dir(self, backup_manager, temp_path):
        """Test listing a missing directory returns nothing."""
        assert backup_manager.list_backups(temp_path / "missing") == []
