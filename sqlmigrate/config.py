"""
Migration Configuration Loader

Reads config/migrate.yaml and builds the settings used by the CLI.
"""

import os
import yaml
import logging
import tempfile
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from sqlmigrate.migration.base_migration import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/migrate.yaml"


@dataclass
class MigrateConfig:
    """Settings for one migration target."""
    database: str = "app.db"
    site_path: str = "."
    scripts_path: str = "sql"
    temp_path: str = field(default_factory=tempfile.gettempdir)
    table: str = "migration"
    executable_extensions: List[str] = field(default_factory=lambda: [".py"])

    @property
    def scripts_root(self) -> str:
        """Scripts directory, resolved against the site path when relative."""
        if os.path.isabs(self.scripts_path):
            return self.scripts_path
        return os.path.join(self.site_path, self.scripts_path)

    def with_overrides(self, **overrides: Optional[str]) -> "MigrateConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


class ConfigLoader:
    """Loads migration configuration from YAML."""

    STRING_KEYS = ("database", "site_path", "scripts_path", "temp_path", "table")

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        """
        Initialize config loader.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = config_path

    def load(self) -> MigrateConfig:
        """
        Load configuration, falling back to defaults when the file is missing.

        Raises:
            ConfigurationError: If the file cannot be parsed or holds bad values
        """
        raw = self._read()
        values: Dict[str, Any] = {}

        for key in self.STRING_KEYS:
            if key not in raw or raw[key] is None:
                continue
            if not isinstance(raw[key], (str, int, float)):
                raise ConfigurationError(f"'{key}' must be a string in {self.config_path}")
            value = self._expand_env_vars(str(raw[key]))
            if value:
                values[key] = value

        extensions = raw.get("executable_extensions")
        if extensions is not None:
            if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
                raise ConfigurationError(
                    f"'executable_extensions' must be a list of strings in {self.config_path}"
                )
            values["executable_extensions"] = extensions

        unknown = set(raw) - set(self.STRING_KEYS) - {"executable_extensions"}
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        return MigrateConfig(**values)

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            logger.warning(f"Migration config not found: {self.config_path}, using defaults")
            return {}

        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load migration config {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Migration config must be a mapping: {self.config_path}")
        return config

    def _expand_env_vars(self, value: str) -> str:
        """Expand ``${VAR}`` references in config values."""
        if value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            return os.environ.get(env_var, "")
        return value
