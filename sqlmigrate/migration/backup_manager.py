"""
Snapshot management for migration batches.

Creates a timestamped snapshot of the database before a batch and restores
it if the batch fails.
"""

import sqlite3
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union

from ..db.sqlite_database import SQLiteDatabase
from .base_migration import BackupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Handle to a point-in-time database backup."""
    path: Path
    created_at: datetime


class BackupManager(ABC):
    """
    Base class for snapshot/restore collaborators.

    The migration manager owns each snapshot for the duration of one batch:
    it calls ``save`` before, then either ``discard`` or ``restore`` +
    ``discard``.
    """

    @abstractmethod
    def save(self, temp_dir: Union[str, Path]) -> Snapshot:
        """
        Take a full snapshot of the database.

        Args:
            temp_dir: Directory to write the snapshot into

        Returns:
            Snapshot handle

        Raises:
            BackupError: If the snapshot cannot be created
        """
        pass

    @abstractmethod
    def restore(self, snapshot: Snapshot) -> None:
        """
        Replace the database contents with a snapshot.

        Raises:
            BackupError: If the restore fails
        """
        pass

    def discard(self, snapshot: Snapshot) -> None:
        """
        Delete a snapshot file.

        Raises:
            BackupError: If the file cannot be removed
        """
        try:
            snapshot.path.unlink()
            logger.debug(f"Discarded snapshot: {snapshot.path}")
        except FileNotFoundError:
            logger.warning(f"Snapshot already gone: {snapshot.path}")
        except OSError as e:
            raise BackupError(f"Failed to delete snapshot: {e}", snapshot_path=snapshot.path) from e


class SQLiteBackupManager(BackupManager):
    """
    Snapshots a SQLite database with the online backup API.

    Features:
    - Timestamped snapshot files in the temp directory
    - Integrity check of every snapshot before it is trusted
    - In-place restore into the caller's live connection
    - Listing of leftover snapshots for manual recovery
    """

    SNAPSHOT_PREFIX = "pre_migration"
    SNAPSHOT_SUFFIX = ".db"

    def __init__(self, database: SQLiteDatabase):
        """
        Initialize backup manager.

        Args:
            database: Database to snapshot
        """
        self.database = database

    def save(self, temp_dir: Union[str, Path]) -> Snapshot:
        backup_dir = Path(temp_dir)
        created_at = datetime.now()
        timestamp = created_at.strftime("%Y%m%d_%H%M%S_%f")
        backup_path = backup_dir / f"{self.SNAPSHOT_PREFIX}_{timestamp}{self.SNAPSHOT_SUFFIX}"

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Creating snapshot: {backup_path}")

            target = sqlite3.connect(str(backup_path))
            try:
                self.database.connection.backup(target)
            finally:
                target.close()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"✗ Snapshot creation failed: {e}")
            self._remove_quietly(backup_path)
            raise BackupError(f"Failed to create snapshot: {e}", snapshot_path=backup_path) from e

        if not self.verify_backup(backup_path):
            self._remove_quietly(backup_path)
            raise BackupError(f"Snapshot verification failed: {backup_path}",
                              snapshot_path=backup_path)

        logger.info(f"✓ Snapshot created: {backup_path} ({backup_path.stat().st_size:,} bytes)")
        return Snapshot(path=backup_path, created_at=created_at)

    def restore(self, snapshot: Snapshot) -> None:
        if not snapshot.path.exists():
            raise BackupError(f"Snapshot not found: {snapshot.path}", snapshot_path=snapshot.path)

        logger.info(f"Restoring snapshot: {snapshot.path}")
        live = self.database.connection
        try:
            if live.in_transaction:
                live.rollback()

            source = sqlite3.connect(str(snapshot.path))
            try:
                source.backup(live)
            finally:
                source.close()
        except sqlite3.Error as e:
            logger.error(f"✗ Restore failed: {e}")
            raise BackupError(f"Failed to restore snapshot: {e}", snapshot_path=snapshot.path) from e

        logger.info(f"✓ Restore complete from {snapshot.path}")

    def verify_backup(self, backup_path: Path) -> bool:
        """
        Verify a snapshot file is a readable, consistent SQLite database.

        Args:
            backup_path: Path to snapshot file

        Returns:
            True if the snapshot passes ``PRAGMA integrity_check``
        """
        if not backup_path.exists() or backup_path.stat().st_size == 0:
            logger.warning(f"⚠ Snapshot missing or empty: {backup_path}")
            return False

        try:
            conn = sqlite3.connect(str(backup_path))
            try:
                result = conn.execute("PRAGMA integrity_check").fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"✗ Snapshot verification failed: {e}")
            return False

        return result is not None and result[0] == "ok"

    def list_backups(self, temp_dir: Union[str, Path]) -> List[Dict]:
        """
        List snapshots left in a temp directory (newest first).

        Snapshots normally disappear at the end of a batch. A leftover file
        means a restore failed and the database needs manual recovery.

        Args:
            temp_dir: Directory snapshots are written to

        Returns:
            List of snapshot info dictionaries
        """
        backup_dir = Path(temp_dir)
        if not backup_dir.is_dir():
            return []

        backups = []
        pattern = f"{self.SNAPSHOT_PREFIX}_*{self.SNAPSHOT_SUFFIX}"
        for backup_file in sorted(backup_dir.glob(pattern), reverse=True):
            stat = backup_file.stat()
            backups.append({
                'filename': backup_file.name,
                'path': backup_file,
                'size': stat.st_size,
                'created': datetime.fromtimestamp(stat.st_mtime)
            })
        return backups

    def _remove_quietly(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove incomplete snapshot {path}: {e}")
