"""
SQLite implementation of the database interface.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

from .base_database import Database, DatabaseError, IntegrityViolation

logger = logging.getLogger(__name__)


class SQLiteDatabase(Database):
    """
    Database collaborator backed by a ``sqlite3`` connection.

    Can wrap an existing connection (the caller keeps ownership) or open one
    from a file path.

    Example:
        db = SQLiteDatabase.open("app.db")
        db.execute("CREATE TABLE t (id INTEGER)")
    """

    driver_name = "sqlite"

    def __init__(self, connection: sqlite3.Connection):
        """
        Initialize with an open connection.

        Args:
            connection: sqlite3 connection, owned by the caller
        """
        self.connection = connection

    @classmethod
    def open(cls, db_path: Union[str, Path]) -> "SQLiteDatabase":
        """
        Open a database file (created if missing).

        Args:
            db_path: Path to the SQLite file, or ``:memory:``

        Returns:
            SQLiteDatabase wrapping the new connection
        """
        try:
            conn = sqlite3.connect(str(db_path))
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open database {db_path}: {e}") from e
        conn.execute("PRAGMA foreign_keys = ON")
        logger.debug(f"Opened SQLite database: {db_path}")
        return cls(conn)

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()

    def table_exists(self, name: str) -> bool:
        rows = self.query(
            "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
            (name,)
        )
        return bool(rows)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        try:
            cursor = self.connection.execute(sql, tuple(params))
            self.connection.commit()
            return cursor.rowcount
        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            raise IntegrityViolation(str(e)) from e
        except sqlite3.Error as e:
            self.connection.rollback()
            raise DatabaseError(str(e)) from e

    def execute_script(self, sql_text: str) -> None:
        # executescript() commits any pending transaction before running
        try:
            self.connection.executescript(sql_text)
        except sqlite3.IntegrityError as e:
            raise IntegrityViolation(str(e)) from e
        except sqlite3.Error as e:
            raise DatabaseError(str(e)) from e

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Tuple]:
        try:
            cursor = self.connection.execute(sql, tuple(params))
            return [tuple(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(str(e)) from e
