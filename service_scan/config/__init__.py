"""Configuration management for service-scan.

This module provides configuration management that supports:
- Hierarchical configuration loading (user, project, explicit file)
- Environment variable overrides
- Validation of the scan settings
"""

from .loader import ConfigurationLoader
from .manager import ConfigurationManager
from .validator import ConfigurationValidator, LoggingSettings, ScanSettings

__all__ = [
    "ConfigurationManager",
    "ConfigurationLoader",
    "ConfigurationValidator",
    "LoggingSettings",
    "ScanSettings",
]
