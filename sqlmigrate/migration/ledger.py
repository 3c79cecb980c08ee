"""
Ledger of applied migration scripts.

A single table inside the target database records each applied script key
together with the time it was applied. Rows are only ever inserted by a
migration run; ``forget`` exists for manual intervention.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from ..db.base_database import Database, DatabaseError, IntegrityViolation
from .base_migration import ConfigurationError, StorageError, DuplicateKeyError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "migration"


@dataclass(frozen=True)
class LedgerEntry:
    """One applied script."""
    path: str
    applied_at: str


class Ledger:
    """
    Tracks which migration scripts have been applied to a database.

    Responsibilities:
    - Create the ledger table on demand
    - Answer "has this key been applied?"
    - Record newly applied keys, failing loudly on duplicates
    """

    def __init__(self, database: Database, table: str = DEFAULT_TABLE):
        """
        Initialize ledger.

        Args:
            database: Database collaborator holding the ledger table
            table: Ledger table name

        Raises:
            ConfigurationError: If the table name is empty
        """
        if not table or not table.strip():
            raise ConfigurationError("Ledger table name must not be empty")
        self.database = database
        self.table = table

    @property
    def _quoted_table(self) -> str:
        return self.database.quote_identifier(self.table)

    def ensure_installed(self) -> None:
        """
        Create the ledger table if it does not exist yet.

        Raises:
            StorageError: If the table check or DDL fails
        """
        try:
            if self.database.table_exists(self.table):
                return

            logger.info(f"Creating migration ledger table: {self.table}")
            self.database.execute(f"""
                CREATE TABLE IF NOT EXISTS {self._quoted_table} (
                    path VARCHAR(255) NOT NULL DEFAULT '',
                    created TIMESTAMP,
                    PRIMARY KEY (path)
                )
            """)
        except DatabaseError as e:
            raise StorageError(f"Cannot install ledger table {self.table}: {e}") from e

    def has(self, key: str) -> bool:
        """
        Check whether a script key has been applied.

        Raises:
            StorageError: If the lookup fails
        """
        try:
            rows = self.database.query(
                f"SELECT path FROM {self._quoted_table} WHERE path = ? LIMIT 1",
                (key,)
            )
        except DatabaseError as e:
            raise StorageError(f"Cannot read ledger table {self.table}: {e}") from e
        return bool(rows)

    def record(self, key: str) -> None:
        """
        Record a script key as applied now.

        Raises:
            DuplicateKeyError: If the key is already recorded
            StorageError: If the insert fails for any other reason
        """
        applied_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            self.database.execute(
                f"INSERT INTO {self._quoted_table} (path, created) VALUES (?, ?)",
                (key, applied_at)
            )
        except IntegrityViolation as e:
            raise DuplicateKeyError(key) from e
        except DatabaseError as e:
            raise StorageError(f"Cannot record '{key}' in {self.table}: {e}") from e

        logger.debug(f"Recorded {key} at {applied_at}")

    def forget(self, key: str) -> bool:
        """
        Remove a key so its script runs again on the next migration.

        Returns:
            True if an entry was removed

        Raises:
            StorageError: If the delete fails
        """
        try:
            removed = self.database.execute(
                f"DELETE FROM {self._quoted_table} WHERE path = ?",
                (key,)
            )
        except DatabaseError as e:
            raise StorageError(f"Cannot remove '{key}' from {self.table}: {e}") from e

        if removed:
            logger.info(f"Removed {key} from migration ledger")
        else:
            logger.warning(f"{key} was not in the migration ledger")
        return removed > 0

    def entries(self) -> List[LedgerEntry]:
        """
        List all recorded scripts ordered by key.

        Raises:
            StorageError: If the query fails
        """
        try:
            rows = self.database.query(
                f"SELECT path, created FROM {self._quoted_table} ORDER BY path"
            )
        except DatabaseError as e:
            raise StorageError(f"Cannot read ledger table {self.table}: {e}") from e
        return [LedgerEntry(path=row[0], applied_at=str(row[1])) for row in rows]
