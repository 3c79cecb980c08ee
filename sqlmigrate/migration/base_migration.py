"""
Base migration types and error taxonomy.

A migration script is a file on disk: either a SQL batch or an executable
(Python) script. Its identity in the ledger is the path relative to the
configured site root, so ledger entries stay valid when the project is
deployed at a different filesystem location.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class MigrationError(Exception):
    """Base exception for all migration failures."""
    pass


class ConfigurationError(MigrationError):
    """Raised when the engine is set up with an invalid root, driver or table."""
    pass


class StorageError(MigrationError):
    """Raised when the ledger table cannot be created, read or written."""
    pass


class DuplicateKeyError(StorageError):
    """Raised when a ledger key is recorded twice (concurrent migrate run)."""

    def __init__(self, key: str):
        super().__init__(f"Ledger already contains '{key}'")
        self.key = key


class ScriptExecutionError(MigrationError):
    """Raised when a script's SQL or executable code fails."""

    def __init__(self, path: Path, detail: str):
        super().__init__(f"Migration script failed: {path}: {detail}")
        self.path = Path(path)
        self.detail = detail


class LedgerInconsistencyError(MigrationError):
    """Raised when a script ran but could not be recorded in the ledger."""

    def __init__(self, key: str, detail: str):
        super().__init__(
            f"Script '{key}' was executed but could not be recorded: {detail}"
        )
        self.key = key
        self.detail = detail


class BackupError(MigrationError):
    """
    Raised when a snapshot cannot be created or restored.

    When raised from a failed restore, ``original_error`` holds the error
    that triggered the restore and ``snapshot_path`` points at the snapshot
    that was kept for manual recovery.
    """

    def __init__(self, message: str, snapshot_path: Optional[Path] = None,
                 original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.snapshot_path = snapshot_path
        self.original_error = original_error


class ScriptKind(Enum):
    """How a migration file is applied."""
    SQL = "sql"
    EXECUTABLE = "executable"


@dataclass(frozen=True)
class MigrationScript:
    """
    A discovered migration file.

    Attributes:
        absolute_path: Location on disk
        relative_key: Ledger identity (site-relative, ``/`` separated)
        kind: SQL batch or executable script
    """
    absolute_path: Path
    relative_key: str
    kind: ScriptKind

    @property
    def name(self) -> str:
        return self.absolute_path.name

    def __str__(self) -> str:
        return f"{self.relative_key} ({self.kind.value})"
