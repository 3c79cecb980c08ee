"""
Migration engine.

Applies SQL and executable upgrade scripts to a database exactly once,
inside a snapshot/restore guard.

Components:
- base_migration: Script types and error taxonomy
- path_normalizer: Absolute path <-> portable ledger key
- ledger: Table of applied script keys
- script_locator: Discovery and ordering of script files
- script_runner: Execution of executable (Python) scripts
- script_applier: At-most-once application of one script
- backup_manager: Snapshots taken before a batch
- version_manager: Batch orchestration (migrate / is_pending / status)
"""

from .base_migration import (
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
from .path_normalizer import PathNormalizer
from .ledger import Ledger, LedgerEntry
from .script_locator import ScriptLocator
from .script_runner import ScriptRunner, PythonScriptRunner
from .script_applier import ScriptApplier
from .backup_manager import BackupManager, SQLiteBackupManager, Snapshot
from .version_manager import MigrationManager

__all__ = [
    'MigrationScript',
    'ScriptKind',
    'MigrationError',
    'ConfigurationError',
    'StorageError',
    'DuplicateKeyError',
    'ScriptExecutionError',
    'LedgerInconsistencyError',
    'BackupError',
    'PathNormalizer',
    'Ledger',
    'LedgerEntry',
    'ScriptLocator',
    'ScriptRunner',
    'PythonScriptRunner',
    'ScriptApplier',
    'BackupManager',
    'SQLiteBackupManager',
    'Snapshot',
    'MigrationManager'
]
