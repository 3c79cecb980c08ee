"""
sqlmigrate - apply ordered SQL and Python upgrade scripts exactly once.

Scripts are discovered under a root directory (plus a driver-specific
subdirectory), recorded in a ledger table inside the target database and
applied inside a snapshot/restore guard so a failed batch never leaves the
database half-migrated.
"""

from .migration import (
    MigrationManager,
    MigrationScript,
    ScriptKind,
    MigrationError,
    ConfigurationError,
    StorageError,
    DuplicateKeyError,
    ScriptExecutionError,
    LedgerInconsistencyError,
    BackupError,
)
from .db import Database, SQLiteDatabase

__version__ = "1.0.0"

__all__ = [
    'MigrationManager',
    'MigrationScript',
    'ScriptKind',
    'MigrationError',
    'ConfigurationError',
    'StorageError',
    'DuplicateKeyError',
    'ScriptExecutionError',
    'LedgerInconsistencyError',
    'BackupError',
    'Database',
    'SQLiteDatabase',
]
