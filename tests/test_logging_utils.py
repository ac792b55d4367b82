"""Tests for logging configuration."""

import sys

from loguru import logger

from service_scan import ServiceCollection, configure_logging


class TestConfigureLogging:
    """Test configure_logging."""

    def teardown_method(self):
        """Restore loguru's default handler."""
        logger.remove()
        logger.disable("service_scan")
        logger.add(sys.stderr)

    def test_enables_package_records(self):
        """Test package records reach the configured sink at its level."""
        messages = []
        configure_logging("DEBUG", format="{level}|{message}", sink=messages.append)

        ServiceCollection().add_singleton(ServiceCollection)
        assert any(m.startswith("DEBUG|Added ServiceDescriptor(ServiceCollection") for m in messages)

    def test_level_filters(self):
        """Test records below the level are dropped."""
        messages = []
        configure_logging("WARNING", format="{message}", sink=messages.append)

        ServiceCollection().add_singleton(ServiceCollection)
        assert messages == []
