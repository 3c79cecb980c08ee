"""
Discovery of migration scripts on disk.

Scripts live directly in a root directory and in a subdirectory named after
the database driver::

    sql/000001_create_users.sql
    sql/000002_seed.py
    sql/sqlite/000003_sqlite_only.sql

Files starting with ``_`` or ``.`` are disabled. Everything found is sorted
by full path; prefix file names with a number to control execution order.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .base_migration import MigrationScript, ScriptKind
from .path_normalizer import PathNormalizer

logger = logging.getLogger(__name__)

SQL_EXTENSION = ".sql"
DEFAULT_EXECUTABLE_EXTENSIONS = (".py",)
DISABLED_PREFIXES = ("_", ".")


class ScriptLocator:
    """Finds and orders migration scripts under a root path."""

    def __init__(self, normalizer: PathNormalizer,
                 executable_extensions: Iterable[str] = DEFAULT_EXECUTABLE_EXTENSIONS):
        """
        Initialize locator.

        Args:
            normalizer: Converts found paths to ledger keys
            executable_extensions: Extensions handled by the script runner
        """
        self.normalizer = normalizer
        self.extensions: Dict[str, ScriptKind] = {SQL_EXTENSION: ScriptKind.SQL}
        for ext in executable_extensions:
            if not ext.startswith("."):
                ext = "." + ext
            self.extensions[ext] = ScriptKind.EXECUTABLE

    def list(self, root_path: Union[str, Path], driver_name: str) -> List[MigrationScript]:
        """
        List migration scripts in ``root_path`` and ``root_path/driver_name``.

        Args:
            root_path: Directory holding shared scripts
            driver_name: Database driver, selects the driver subdirectory

        Returns:
            Scripts sorted lexicographically by full path
        """
        root = Path(root_path)
        paths = self._search(root)
        if driver_name:
            paths.extend(self._search(root / driver_name))

        paths.sort(key=str)
        scripts = [
            MigrationScript(
                absolute_path=path,
                relative_key=self.normalizer.to_relative(path),
                kind=self.kind_of(path)
            )
            for path in paths
        ]

        logger.debug(f"Found {len(scripts)} migration scripts under {root}")
        return scripts

    def kind_of(self, path: Path) -> ScriptKind:
        """Return the script kind for a file, by extension."""
        return self.extensions[path.suffix]

    def _search(self, directory: Path) -> List[Path]:
        """
        Collect candidate files directly inside a directory.

        Args:
            directory: Directory to scan (non-recursive)

        Returns:
            Unsorted list of absolute paths, empty if the directory is missing
        """
        if not directory.is_dir():
            return []

        found = []
        for entry in directory.iterdir():
            if entry.name.startswith(DISABLED_PREFIXES):
                continue
            if entry.suffix not in self.extensions:
                continue
            if entry.is_dir():
                continue
            found.append(entry.absolute())
        return found
