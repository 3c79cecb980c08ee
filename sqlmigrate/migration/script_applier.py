"""
Applies a single migration script at most once.
"""

import os
import logging
from typing import Optional

from ..db.base_database import Database, DatabaseError
from .base_migration import (
    MigrationScript,
    ScriptKind,
    StorageError,
    ScriptExecutionError,
    LedgerInconsistencyError,
)
from .ledger import Ledger
from .script_runner import ScriptRunner, PythonScriptRunner

logger = logging.getLogger(__name__)


class ScriptApplier:
    """
    Executes one migration script and records it in the ledger.

    A script whose key is already in the ledger is skipped. A script that
    cannot be read is skipped too, without being recorded, so it remains
    pending until the file becomes readable.
    """

    def __init__(self, database: Database, ledger: Ledger,
                 runner: Optional[ScriptRunner] = None):
        """
        Initialize applier.

        Args:
            database: Database the scripts run against
            ledger: Ledger recording applied scripts
            runner: Runner for executable scripts (defaults to PythonScriptRunner)
        """
        self.database = database
        self.ledger = ledger
        self.runner = runner or PythonScriptRunner()

    def is_readable(self, script: MigrationScript) -> bool:
        """Return True if the script file exists and can be read."""
        path = script.absolute_path
        return path.is_file() and os.access(path, os.R_OK)

    def apply(self, script: MigrationScript) -> bool:
        """
        Apply a script unless it has already been applied.

        Args:
            script: Script to apply

        Returns:
            True if the script ran and was recorded, False if skipped

        Raises:
            ScriptExecutionError: If the script's SQL or code fails
            LedgerInconsistencyError: If the script ran but was not recorded
            StorageError: If the ledger lookup fails
        """
        key = script.relative_key

        if self.ledger.has(key):
            logger.debug(f"Already applied, skipping: {key}")
            return False

        if not self.is_readable(script):
            logger.warning(f"Migration script not readable, leaving it pending: {key}")
            return False

        logger.info(f"Applying migration: {script}")

        if script.kind is ScriptKind.EXECUTABLE:
            self._run_executable(script)
        else:
            self._run_sql(script)

        try:
            self.ledger.record(key)
        except StorageError as e:
            logger.error(f"✗ {key} executed but could not be recorded: {e}")
            raise LedgerInconsistencyError(key, str(e)) from e

        logger.info(f"✓ Migration applied: {key}")
        return True

    def _run_sql(self, script: MigrationScript) -> None:
        try:
            sql_text = script.absolute_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScriptExecutionError(script.absolute_path, f"cannot read file: {e}") from e

        try:
            self.database.execute_script(sql_text)
        except DatabaseError as e:
            logger.error(f"✗ SQL migration {script.relative_key} failed: {e}")
            raise ScriptExecutionError(script.absolute_path, str(e)) from e

    def _run_executable(self, script: MigrationScript) -> None:
        try:
            self.runner.run(script.absolute_path, self.database)
        except (Exception, SystemExit) as e:
            logger.error(f"✗ Executable migration {script.relative_key} failed: {e}")
            raise ScriptExecutionError(script.absolute_path, str(e)) from e
