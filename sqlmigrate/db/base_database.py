"""
Abstract database interface for the migration engine.

The engine never talks to a DB-API driver directly. It goes through a
``Database`` which owns the connection, reports its driver name (used to
pick the driver-specific script directory) and translates driver errors
into ``DatabaseError`` / ``IntegrityViolation``.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Sequence, Tuple


class DatabaseError(Exception):
    """Base exception for database errors raised through the interface."""
    pass


class IntegrityViolation(DatabaseError):
    """Raised when a statement violates a uniqueness or key constraint."""
    pass


class Database(ABC):
    """
    Base class for database collaborators.

    Implementations must:
    - Expose ``driver_name`` matching the script subdirectory convention
      (e.g. ``sqlite``, ``mysql``, ``pgsql``)
    - Accept qmark (``?``) placeholders in ``execute`` and ``query``
    - Raise ``DatabaseError`` (or ``IntegrityViolation``) on failure

    The connection is owned by the caller; the engine never closes it.
    """

    driver_name: str

    @abstractmethod
    def table_exists(self, name: str) -> bool:
        """
        Check whether a table exists.

        Args:
            name: Unquoted table name

        Returns:
            True if the table exists
        """
        pass

    @abstractmethod
    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Execute a single DDL/DML statement and commit it.

        Args:
            sql: SQL statement
            params: Positional parameters

        Returns:
            Number of affected rows (driver dependent for DDL)
        """
        pass

    @abstractmethod
    def execute_script(self, sql_text: str) -> None:
        """
        Execute a multi-statement SQL batch.

        Args:
            sql_text: One or more statements separated by semicolons
        """
        pass

    @abstractmethod
    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Tuple]:
        """
        Run a query and fetch all rows.

        Args:
            sql: SELECT statement
            params: Positional parameters

        Returns:
            List of row tuples
        """
        pass

    def quote(self, value: str) -> str:
        """Quote a string literal for inclusion in SQL text."""
        return "'" + str(value).replace("'", "''") + "'"

    def quote_identifier(self, name: str) -> str:
        """Quote a table or column identifier."""
        return '"' + name.replace('"', '""') + '"'

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} driver={self.driver_name}>"
