"""Tests for specific error types."""

from pathlib import Path

import pytest

from service_scan.errors import (
    ConfigurationError,
    ConfiguratorError,
    DeclarationError,
    PreconditionError,
    ResolutionError,
    ServiceScanError,
    TypeSourceError,
)


class Widget:
    pass


class TestErrorHierarchy:
    """Test error classes integrate with builtin exception handling."""

    @pytest.mark.parametrize(
        "error_class",
        [ConfigurationError, ConfiguratorError, DeclarationError, PreconditionError, ResolutionError, TypeSourceError],
    )
    def test_base_class(self, error_class):
        """Test every error is a ServiceScanError."""
        assert issubclass(error_class, ServiceScanError)

    def test_builtin_bases(self):
        """Test precondition and resolution errors can be caught as builtins."""
        with pytest.raises(ValueError):
            raise PreconditionError.missing_argument("services")
        with pytest.raises(LookupError):
            raise ResolutionError.not_registered(Widget)

    def test_generated_codes(self):
        """Test default error codes derive from the class name."""
        assert PreconditionError("bad").error_code == "PRECONDITION"
        assert TypeSourceError("bad").error_code == "TYPE_SOURCE"


class TestFactories:
    """Test the factory methods."""

    def test_missing_argument(self):
        """Test missing argument error."""
        error = PreconditionError.missing_argument("source")
        assert error.argument == "source"
        assert error.error_code == "PRECONDITION_MISSING_ARGUMENT"
        assert str(error) == "Argument 'source' must not be None"

    def test_duplicate_declaration(self):
        """Test duplicate declaration error."""
        error = DeclarationError.duplicate(Widget)
        assert error.service_type is Widget
        assert error.error_code == "DECLARATION_DUPLICATE"
        assert error.context.technical_details["service_type"] == "Widget"
        assert error.context.suggestions

    def test_invalid_declaration(self):
        """Test invalid declaration error keeps its cause."""
        cause = ValueError("bad lifetime")
        error = DeclarationError.invalid("bad lifetime", cause=cause)
        assert error.cause is cause
        assert str(error).startswith("Invalid service declaration")

    def test_configurator_construction_failed(self):
        """Test configurator construction error."""
        error = ConfiguratorError.construction_failed(Widget, TypeError("missing argument"))
        assert error.configurator_type is Widget
        assert error.error_code == "CONFIGURATOR_CONSTRUCTION_FAILED"
        assert "missing argument" in str(error)

    def test_import_failed(self):
        """Test type source import error."""
        error = TypeSourceError.import_failed("app.services", ModuleNotFoundError("app"))
        assert error.source == "app.services"
        assert error.context.technical_details["source"] == "app.services"

    def test_not_registered(self):
        """Test resolution error message."""
        error = ResolutionError.not_registered(Widget)
        assert str(error) == "No service for type Widget has been registered"

    def test_configuration_errors(self):
        """Test configuration error details."""
        error = ConfigurationError.invalid_file(Path("service-scan.yaml"), ValueError("not a mapping"))
        assert error.context.technical_details["config_path"] == "service-scan.yaml"
        assert error.error_code == "CONFIG_INVALID_FILE"

        error = ConfigurationError.invalid_value("logging.level", "unknown level")
        assert error.context.technical_details["field_path"] == "logging.level"
        assert "logging.level" in error.context.suggestions[0]
