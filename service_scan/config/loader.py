"""Configuration loading utilities.

This module provides utilities for loading configuration from:
- YAML files
- JSON files
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

try:
    from yaml import CSafeLoader as YamlLoader
except ImportError:
    from yaml import SafeLoader as YamlLoader

from ..errors import ConfigurationError


class ConfigurationLoader:
    """Utility class for loading configuration from files."""

    def load_yaml(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigurationError: If the YAML is invalid or not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = yaml.load(f, Loader=YamlLoader) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError.invalid_file(path, e) from e

        if not isinstance(content, dict):
            raise ConfigurationError.invalid_file(
                path, TypeError(f"expected a mapping, got {type(content).__name__}")
            )
        return content

    def load_json(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigurationError: If the JSON is invalid or not an object
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = json.load(f) or {}
        except json.JSONDecodeError as e:
            raise ConfigurationError.invalid_file(path, e) from e

        if not isinstance(content, dict):
            raise ConfigurationError.invalid_file(
                path, TypeError(f"expected an object, got {type(content).__name__}")
            )
        return content

    def load_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML or JSON file based on its suffix."""
        path = Path(path)
        if path.suffix.lower() in ('.yaml', '.yml'):
            return self.load_yaml(path)
        if path.suffix.lower() == '.json':
            return self.load_json(path)
        raise ConfigurationError(
            f"Unsupported configuration file format: {path}",
            config_path=path,
            error_code="CONFIG_UNSUPPORTED_FORMAT",
        )

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries with deep merging.

        The override dict takes precedence over the base dict.
        Nested dictionaries are merged recursively.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (key in result and
                isinstance(result[key], dict) and
                isinstance(value, dict)):
                result[key] = self.merge_configs(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def load_multiple(self, paths: List[Union[str, Path]]) -> Dict[str, Any]:
        """Load and merge multiple configuration files.

        Files are loaded in order, with later files overriding earlier ones.
        Missing files are skipped.
        """
        result: Dict[str, Any] = {}

        for path in paths:
            path = Path(path)
            if not path.exists():
                continue
            result = self.merge_configs(result, self.load_file(path))

        return result
