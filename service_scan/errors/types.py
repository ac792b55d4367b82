"""Specific error types for service-scan modules."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional

from .base import ServiceScanError


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


class PreconditionError(ServiceScanError, ValueError):
    """A required argument was missing or invalid."""

    def __init__(self, message: str, *, argument: Optional[str] = None, **kwargs: Any):
        """Initialize precondition error."""
        super().__init__(message, **kwargs)
        self.argument = argument

        if argument:
            self.context.add_technical_detail("argument", argument)

    @classmethod
    def missing_argument(cls, argument: str) -> "PreconditionError":
        """Create error for a required argument passed as None."""
        return cls(
            f"Argument '{argument}' must not be None",
            argument=argument,
            error_code="PRECONDITION_MISSING_ARGUMENT",
        )


class DeclarationError(ServiceScanError):
    """A service declaration is malformed or conflicts with another one."""

    def __init__(
        self,
        message: str,
        *,
        service_type: Optional[type] = None,
        field_names: Optional[Iterable[str]] = None,
        **kwargs: Any,
    ):
        """Initialize declaration error."""
        super().__init__(message, **kwargs)
        self.service_type = service_type

        if service_type is not None:
            self.context.add_technical_detail("service_type", _type_name(service_type))
        if field_names:
            self.context.add_technical_detail("fields", sorted(field_names))

    @classmethod
    def duplicate(cls, service_type: type) -> "DeclarationError":
        """Create error for a class declared more than once."""
        error = cls(
            f"{_type_name(service_type)} already has a service declaration",
            service_type=service_type,
            error_code="DECLARATION_DUPLICATE",
        )
        error.with_suggestion("Declare each class once, either with @service or in configuration")
        return error

    @classmethod
    def invalid(cls, message: str, *, cause: Optional[BaseException] = None) -> "DeclarationError":
        """Create error for a declaration built from invalid raw metadata."""
        error = cls(
            f"Invalid service declaration: {message}",
            cause=cause,
            error_code="DECLARATION_INVALID",
        )
        error.with_suggestion(
            "Allowed fields are lifetime, registration, try_add and types_to_register"
        )
        return error


class ConfiguratorError(ServiceScanError):
    """A service configurator could not be created or applied."""

    def __init__(self, message: str, *, configurator_type: Optional[type] = None, **kwargs: Any):
        """Initialize configurator error."""
        super().__init__(message, **kwargs)
        self.configurator_type = configurator_type

        if configurator_type is not None:
            self.context.add_technical_detail("configurator", _type_name(configurator_type))

    @classmethod
    def construction_failed(cls, configurator_type: type, cause: BaseException) -> "ConfiguratorError":
        """Create error for a configurator that cannot be default-constructed."""
        error = cls(
            f"Failed to create configurator {_type_name(configurator_type)}: {cause}",
            configurator_type=configurator_type,
            cause=cause,
            error_code="CONFIGURATOR_CONSTRUCTION_FAILED",
        )
        error.with_suggestion("Configurators must be constructible without arguments")
        return error

    @classmethod
    def not_a_configurator(cls, obj: Any) -> "ConfiguratorError":
        """Create error for an object that does not implement ServiceConfigurator."""
        return cls(
            f"{obj!r} is not a ServiceConfigurator",
            error_code="CONFIGURATOR_INVALID",
        )


class TypeSourceError(ServiceScanError):
    """A type source could not be created or enumerated."""

    def __init__(self, message: str, *, source: Optional[str] = None, **kwargs: Any):
        """Initialize type source error."""
        super().__init__(message, **kwargs)
        self.source = source

        if source:
            self.context.add_technical_detail("source", source)

    @classmethod
    def import_failed(cls, module_name: str, cause: BaseException) -> "TypeSourceError":
        """Create error for a module that cannot be imported."""
        error = cls(
            f"Failed to import module {module_name}: {cause}",
            source=module_name,
            cause=cause,
            error_code="TYPE_SOURCE_IMPORT_FAILED",
        )
        error.with_suggestion(f"Check that '{module_name}' is importable from the current path")
        return error

    @classmethod
    def unsupported(cls, obj: Any) -> "TypeSourceError":
        """Create error for an object that cannot act as a type source."""
        return cls(
            f"Cannot scan {obj!r}: expected a module, a module name or an iterable of classes",
            error_code="TYPE_SOURCE_UNSUPPORTED",
        )


class ResolutionError(ServiceScanError, LookupError):
    """A service could not be resolved from a provider."""

    def __init__(self, message: str, *, service_type: Any = None, **kwargs: Any):
        """Initialize resolution error."""
        super().__init__(message, **kwargs)
        self.service_type = service_type

        if service_type is not None:
            self.context.add_technical_detail("service_type", _type_name(service_type))

    @classmethod
    def not_registered(cls, service_type: Any) -> "ResolutionError":
        """Create error for a service type with no registration."""
        error = cls(
            f"No service for type {_type_name(service_type)} has been registered",
            service_type=service_type,
            error_code="RESOLUTION_NOT_REGISTERED",
        )
        error.with_suggestion("Decorate the implementation with @service or add it to the collection")
        return error


class ConfigurationError(ServiceScanError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[Path] = None,
        field_path: Optional[str] = None,
        **kwargs: Any,
    ):
        """Initialize configuration error."""
        super().__init__(message, **kwargs)

        if config_path:
            self.context.add_technical_detail("config_path", str(config_path))
        if field_path:
            self.context.add_technical_detail("field_path", field_path)

    @classmethod
    def invalid_file(cls, config_path: Path, cause: BaseException) -> "ConfigurationError":
        """Create error for a configuration file that cannot be parsed."""
        error = cls(
            f"Invalid configuration file {config_path}: {cause}",
            config_path=config_path,
            cause=cause,
            error_code="CONFIG_INVALID_FILE",
        )
        error.with_suggestion("Configuration files must contain a mapping at the top level")
        return error

    @classmethod
    def invalid_value(cls, field_path: str, reason: str) -> "ConfigurationError":
        """Create error for invalid configuration value."""
        error = cls(
            f"Invalid value for {field_path}: {reason}",
            field_path=field_path,
            error_code="CONFIG_INVALID_VALUE",
        )
        error.with_suggestion(f"Check '{field_path}' in your configuration file")
        return error
