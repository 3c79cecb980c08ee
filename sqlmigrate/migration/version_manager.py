"""
Migration orchestration.

Runs every pending script under a root directory inside a snapshot guard:
the database is snapshotted first, and restored if any script fails, so a
caller sees either the whole batch applied or none of it.
"""

import logging
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..db.base_database import Database
from .base_migration import MigrationScript, BackupError, ConfigurationError
from .backup_manager import BackupManager
from .ledger import Ledger, DEFAULT_TABLE
from .path_normalizer import PathNormalizer
from .script_applier import ScriptApplier
from .script_locator import ScriptLocator, DEFAULT_EXECUTABLE_EXTENSIONS
from .script_runner import ScriptRunner

logger = logging.getLogger(__name__)


class MigrationManager:
    """
    Applies pending migration scripts to a database.

    Responsibilities:
    - Keep the ledger table installed
    - Discover scripts for the database's driver
    - Apply pending scripts in order, recording each one
    - Snapshot before a batch and restore on failure

    Example:
        db = SQLiteDatabase.open("app.db")
        manager = MigrationManager(db, SQLiteBackupManager(db), site_path="/srv/app")
        applied = manager.migrate("/srv/app/sql")
    """

    def __init__(self, database: Database, backup_manager: BackupManager,
                 site_path: Union[str, Path],
                 temp_path: Optional[Union[str, Path]] = None,
                 table: str = DEFAULT_TABLE,
                 runner: Optional[ScriptRunner] = None,
                 executable_extensions: Iterable[str] = DEFAULT_EXECUTABLE_EXTENSIONS):
        """
        Initialize migration manager.

        Args:
            database: Database to migrate (connection owned by the caller)
            backup_manager: Snapshot/restore collaborator for the database
            site_path: Root directory ledger keys are relative to
            temp_path: Directory for batch snapshots (default: system temp dir)
            table: Ledger table name
            runner: Runner for executable scripts
            executable_extensions: File extensions treated as executable scripts

        Raises:
            ConfigurationError: If the site path, driver or table is invalid
        """
        if not getattr(database, "driver_name", None):
            raise ConfigurationError(f"{type(database).__name__} does not report a driver name")

        self.database = database
        self.backup_manager = backup_manager
        self.temp_path = Path(temp_path) if temp_path else Path(tempfile.gettempdir())

        self.normalizer = PathNormalizer(site_path)
        self.ledger = Ledger(database, table)
        self.locator = ScriptLocator(self.normalizer, executable_extensions)
        self.applier = ScriptApplier(database, self.ledger, runner)

    @property
    def driver_name(self) -> str:
        return self.database.driver_name

    def list_scripts(self, root_path: Union[str, Path]) -> List[MigrationScript]:
        """List every script under a root, applied or not, in execution order."""
        return self.locator.list(root_path, self.driver_name)

    def migrate(self, root_path: Union[str, Path]) -> List[str]:
        """
        Apply all pending scripts under a root path.

        Args:
            root_path: Directory holding the migration scripts

        Returns:
            Keys of the scripts applied by this call, in application order

        Raises:
            BackupError: If the snapshot cannot be taken, or a failed batch
                cannot be restored (the snapshot is then kept)
            ScriptExecutionError: If a script fails (database restored)
            LedgerInconsistencyError: If a script ran but was not recorded
                (database restored)
            StorageError: If the ledger cannot be installed or read
        """
        self.ledger.ensure_installed()
        snapshot = self.backup_manager.save(self.temp_path)

        applied = []
        try:
            scripts = self.list_scripts(root_path)
            logger.info(f"Migrating {root_path}: {len(scripts)} scripts found")

            for script in scripts:
                if self.applier.apply(script):
                    applied.append(script.relative_key)

        except BaseException as e:
            logger.error(f"✗ Migration batch failed, restoring snapshot: {e}")
            try:
                self.backup_manager.restore(snapshot)
            except Exception as restore_error:
                logger.error(
                    f"✗ Restore failed, database may be inconsistent. "
                    f"Snapshot kept at: {snapshot.path}"
                )
                raise BackupError(
                    f"Migration failed ({e}) and restore failed ({restore_error}); "
                    f"snapshot kept at {snapshot.path}",
                    snapshot_path=snapshot.path,
                    original_error=e
                ) from restore_error

            try:
                self.backup_manager.discard(snapshot)
            except BackupError as discard_error:
                logger.warning(f"Database restored but snapshot not deleted: {discard_error}")
            raise

        try:
            self.backup_manager.discard(snapshot)
        except BackupError as discard_error:
            logger.warning(f"Batch committed but snapshot not deleted, remove {snapshot.path}: {discard_error}")

        if applied:
            logger.info(f"✓ Applied {len(applied)} migrations")
        else:
            logger.info("No pending migrations")
        return applied

    def pending(self, root_path: Union[str, Path]) -> List[MigrationScript]:
        """
        List scripts not yet recorded in the ledger.

        Unreadable scripts are included: they are never recorded, so they
        stay pending until fixed.
        """
        self.ledger.ensure_installed()
        return [
            script for script in self.list_scripts(root_path)
            if not self.ledger.has(script.relative_key)
        ]

    def is_pending(self, root_path: Union[str, Path]) -> bool:
        """
        Check whether any script under a root has not been applied.

        Read-only: takes no snapshot and applies nothing.
        """
        self.ledger.ensure_installed()
        for script in self.list_scripts(root_path):
            if not self.ledger.has(script.relative_key):
                return True
        return False

    def forget(self, key: str) -> bool:
        """Remove a key from the ledger so its script runs again."""
        self.ledger.ensure_installed()
        return self.ledger.forget(key)

    def get_migration_status(self, root_path: Union[str, Path]) -> Dict:
        """
        Get migration status for a root path.

        Returns:
            Status dictionary with driver, table, applied count and the
            pending and unreadable script keys
        """
        pending = self.pending(root_path)
        entries = self.ledger.entries()

        return {
            'driver': self.driver_name,
            'table': self.ledger.table,
            'root': str(root_path),
            'applied_count': len(entries),
            'pending_count': len(pending),
            'applied_migrations': [
                {'path': e.path, 'applied_at': e.applied_at} for e in entries
            ],
            'pending_migrations': [s.relative_key for s in pending],
            'unreadable_migrations': [
                s.relative_key for s in pending if not self.applier.is_readable(s)
            ]
        }
