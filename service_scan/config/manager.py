"""Configuration management for service-scan.

This module provides configuration loading that supports:
- Hierarchical configuration files (user, project, explicit)
- Environment variable overrides
- Validation against the ``ScanSettings`` schema
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from .loader import ConfigurationLoader
from .validator import ConfigurationValidator, ScanSettings

ENV_PREFIX = "SERVICE_SCAN_"


class ConfigurationManager:
    """Central configuration manager.

    Supports hierarchical configuration loading, later sources winning:
    1. User config: ~/.service-scan/config.yaml
    2. Project config: ./service-scan.yaml
    3. Explicit config: the path given by the caller
    4. Environment variables prefixed with SERVICE_SCAN_
    """

    def __init__(
        self,
        user_config_path: Optional[Path] = None,
        project_config_path: Optional[Path] = None,
        config_path: Optional[Path] = None,
    ):
        """Initialize configuration manager.

        Args:
            user_config_path: Path to user config file
            project_config_path: Path to project config file
            config_path: Path to an explicit config file
        """
        self.loader = ConfigurationLoader()
        self.validator = ConfigurationValidator()

        self.user_config_path = Path(user_config_path) if user_config_path else self._get_default_user_config_path()
        self.project_config_path = Path(project_config_path) if project_config_path else self._get_default_project_config_path()
        self.config_path = Path(config_path) if config_path else None

        self._config_cache: Optional[Dict[str, Any]] = None
        self._settings_cache: Optional[ScanSettings] = None

    def _get_default_user_config_path(self) -> Path:
        """Get default user config path."""
        return Path.home() / ".service-scan" / "config.yaml"

    def _get_default_project_config_path(self) -> Path:
        """Get default project config path."""
        return Path.cwd() / "service-scan.yaml"

    def load_configuration(self) -> Dict[str, Any]:
        """Load hierarchical configuration.

        Returns:
            Merged and validated configuration dictionary

        Raises:
            FileNotFoundError: If an explicit config path does not exist
            ConfigurationError: If a file is invalid or validation fails
        """
        if self._config_cache is not None:
            return self._config_cache

        if self.config_path and not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        config = self.loader.load_multiple([
            self.user_config_path,
            self.project_config_path,
            *([self.config_path] if self.config_path else []),
        ])
        config = self._apply_env_overrides(config)

        self._settings_cache = self.validator.validate(config)
        self._config_cache = config
        logger.debug(f"Loaded configuration with sections: {', '.join(sorted(config)) or 'none'}")
        return config

    def load_settings(self) -> ScanSettings:
        """Load configuration and return it as validated settings."""
        self.load_configuration()
        return self._settings_cache

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides.

        Environment variables with the SERVICE_SCAN_ prefix override config values.
        Examples:
        - SERVICE_SCAN_LOGGING_LEVEL=DEBUG -> config.logging.level = "DEBUG"
        - SERVICE_SCAN_SOURCES=app.services,app.adapters -> config.sources

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        config = copy.deepcopy(config)

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == ENV_PREFIX:
                continue

            config_path = key[len(ENV_PREFIX):].lower().split("_")

            current = config
            for path_part in config_path[:-1]:
                if not isinstance(current.get(path_part), dict):
                    current[path_part] = {}
                current = current[path_part]

            current[config_path[-1]] = self._convert_env_value(value)

        return config

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Convert environment variable string to appropriate type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Args:
            key: Configuration key (e.g., "logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current: Any = self.load_configuration()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def reload_configuration(self) -> Dict[str, Any]:
        """Reload configuration from files and environment."""
        self._config_cache = None
        self._settings_cache = None
        return self.load_configuration()
