"""
Unit tests for the SQLite database collaborator.
"""

import pytest

from sqlmigrate.db.base_database import DatabaseError, IntegrityViolation
from sqlmigrate.db.sqlite_database import SQLiteDatabase


@pytest.mark.unit
class TestSQLiteDatabase:
    """Tests for query execution and error translation."""

    def test_driver_name(self, database):
        assert database.driver_name == "sqlite"

    def test_table_exists(self, database):
        """Test table lookup by name."""
        assert database.table_exists("sentinel")
        assert not database.table_exists("missing")

    def test_execute_returns_rowcount(self, database):
        """Test DML reports the number of affected rows."""
        database.execute("INSERT INTO sentinel (value) VALUES (?)", ("second",))

        assert database.execute("DELETE FROM sentinel") == 2

    def test_execute_script_runs_all_statements(self, database):
        """Test a multi-statement batch runs in order."""
        database.execute_script("""
            CREATE TABLE t (id INTEGER PRIMARY KEY);
            INSERT INTO t (id) VALUES (1);
            INSERT INTO t (id) VALUES (2);
        """)

        assert database.query("SELECT id FROM t ORDER BY id") == [(1,), (2,)]

    def test_constraint_violation(self, database):
        """Test key violations raise IntegrityViolation."""
        database.execute("CREATE TABLE u (id INTEGER PRIMARY KEY)")
        database.execute("INSERT INTO u (id) VALUES (1)")

        with pytest.raises(IntegrityViolation):
            database.execute("INSERT INTO u (id) VALUES (1)")

    def test_syntax_error(self, database):
        """Test driver errors surface as DatabaseError with the driver message."""
        with pytest.raises(DatabaseError) as exc_info:
            database.execute_script("CREATE TABLE;")

        assert "syntax error" in str(exc_info.value)

    def test_query_error(self, database):
        with pytest.raises(DatabaseError):
            database.query("SELECT * FROM missing")

    def test_quote_helpers(self, database):
        """Test literal and identifier quoting escape embedded quotes."""
        assert database.quote("o'brien") == "'o''brien'"
        assert database.quote_identifier('my"table') == '"my""table"'

        rows = database.query(f"SELECT {database.quote('o' + chr(39) + 'brien')}")
        assert rows == [("o'brien",)]

    def test_open_unreachable_path(self, site_path):
        """Test a database in a missing directory cannot be opened."""
        with pytest.raises(DatabaseError):
            SQLiteDatabase.open(site_path / "missing" / "dir" / "x.db")
