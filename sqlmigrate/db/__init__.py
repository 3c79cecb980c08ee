"""
Database collaborators used by the migration engine.

Components:
- base_database: Abstract database interface and driver-neutral errors
- sqlite_database: SQLite implementation (driver name ``sqlite``)
"""

from .base_database import Database, DatabaseError, IntegrityViolation
from .sqlite_database import SQLiteDatabase

__all__ = [
    'Database',
    'DatabaseError',
    'IntegrityViolation',
    'SQLiteDatabase'
]
