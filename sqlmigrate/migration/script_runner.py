"""
Runners for executable migration scripts.

An executable migration is trusted project code. It runs in-process with
full access to the database collaborator; nothing is sandboxed.

Example script (``sql/000004_backfill.py``)::

    def up(db):
        for (user_id,) in db.query("SELECT id FROM users"):
            db.execute("INSERT INTO profiles (user_id) VALUES (?)", (user_id,))
"""

import runpy
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from ..db.base_database import Database

logger = logging.getLogger(__name__)


class ScriptRunner(ABC):
    """Base class for runners of executable migration scripts."""

    @abstractmethod
    def run(self, path: Path, database: Database) -> None:
        """
        Execute a script.

        Args:
            path: Absolute path of the script
            database: Database the script migrates

        Raises:
            Exception: Any failure; the applier wraps it in ScriptExecutionError
        """
        pass


class PythonScriptRunner(ScriptRunner):
    """
    Runs ``.py`` migrations with ``runpy``.

    The module body executes with ``db`` bound in its globals. If the module
    defines a callable ``up``, it is then called with the database.
    """

    def run(self, path: Path, database: Database) -> None:
        logger.debug(f"Running Python migration: {path}")
        namespace = runpy.run_path(
            str(path),
            init_globals={'db': database},
            run_name="__migration__"
        )

        up = namespace.get('up')
        if callable(up):
            up(database)
