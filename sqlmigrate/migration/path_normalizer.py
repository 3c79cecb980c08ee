"""
Maps absolute script paths to portable ledger keys and back.
"""

import os
import logging
from pathlib import Path, PurePosixPath
from typing import Union

from .base_migration import ConfigurationError

logger = logging.getLogger(__name__)


class PathNormalizer:
    """
    Converts between absolute paths and site-relative ledger keys.

    Example:
        normalizer = PathNormalizer("/srv/app")
        normalizer.to_relative("/srv/app/sql/mysql/001.sql")  # 'sql/mysql/001.sql'
    """

    def __init__(self, site_path: Union[str, Path]):
        """
        Initialize normalizer.

        Args:
            site_path: Root directory every script key is relative to

        Raises:
            ConfigurationError: If the root is empty or does not exist
        """
        if site_path is None or not str(site_path).strip():
            raise ConfigurationError("Site path must not be empty")

        root = Path(os.path.abspath(str(site_path)))
        if not root.is_dir():
            raise ConfigurationError(f"Site path does not exist or is not a directory: {root}")

        self.site_path = root

    def to_relative(self, path: Union[str, Path]) -> str:
        """
        Strip the site root from an absolute path.

        Args:
            path: Path under the site root

        Returns:
            Key with no leading or trailing separator, ``/`` separated

        Raises:
            ConfigurationError: If the path is not under the site root
        """
        absolute = Path(os.path.abspath(str(path)))
        try:
            relative = absolute.relative_to(self.site_path)
        except ValueError:
            raise ConfigurationError(
                f"Path {absolute} is outside the site path {self.site_path}"
            ) from None

        key = relative.as_posix().strip("/")
        if not key or key == ".":
            raise ConfigurationError(f"Path {absolute} is the site path itself")
        return key

    def to_absolute(self, key: str) -> Path:
        """
        Rebuild the absolute path of a ledger key.

        Args:
            key: Key produced by ``to_relative``

        Returns:
            Absolute path under the site root
        """
        return self.site_path.joinpath(*PurePosixPath(key.strip("/")).parts)
