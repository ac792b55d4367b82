"""Pytest configuration and shared fixtures for all tests."""

from typing import List

import pytest
from loguru import logger

from service_scan import ServiceCollection, scan_one


@pytest.fixture
def services():
    """Fresh, empty service collection."""
    return ServiceCollection()


@pytest.fixture
def scanned_services():
    """Collection populated by scanning the mock services package."""
    return scan_one(ServiceCollection(), "service_mocks")


@pytest.fixture
def provider(scanned_services):
    """Provider over the scanned mock services; disposed after the test."""
    provider = scanned_services.build_provider()
    yield provider
    provider.dispose()


@pytest.fixture
def log_messages():
    """Capture the package's log records as formatted strings."""
    messages: List[str] = []
    logger.enable("service_scan")
    handler_id = logger.add(messages.append, format="{level}|{message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)
    logger.disable("service_scan")
