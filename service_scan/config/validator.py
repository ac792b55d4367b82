"""Configuration validation utilities.

The merged configuration mapping is validated against the ``ScanSettings``
schema, which describes what the bootstrap scans and declares.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging section."""
    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def _check_level(cls, value: Any) -> str:
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level


class ScanSettings(BaseModel):
    """Validated service-scan configuration.

    Attributes:
        sources: Dotted module or package names, scanned in order
        recursive: Whether packages are walked into their submodules
        services: Declarations keyed by ``"package.module:ClassName"``; values
            hold the raw declaration fields
        logging: Logging settings
    """
    model_config = ConfigDict(extra="ignore")

    sources: List[str] = Field(default_factory=list)
    recursive: bool = True
    services: Dict[str, Optional[Dict[str, Any]]] = Field(default_factory=dict)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("sources", mode="before")
    @classmethod
    def _split_sources(cls, value: Any) -> Any:
        # Environment overrides arrive as comma-separated strings
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class ConfigurationValidator:
    """Configuration validation utility."""

    def validate(self, config: Dict[str, Any]) -> ScanSettings:
        """Validate complete configuration.

        Args:
            config: Configuration to validate

        Returns:
            The validated settings

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            return ScanSettings.model_validate(config or {})
        except ValidationError as e:
            first = e.errors()[0]
            field_path = ".".join(str(part) for part in first["loc"])
            raise ConfigurationError.invalid_value(field_path, first["msg"]) from e
