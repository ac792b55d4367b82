"""Tests for the configuration-driven bootstrap."""

import os

import pytest

from service_scan import ScanBootstrap, ServiceCollection
from service_scan.di.collection import Lifetime
from service_scan.di.decorators import get_service_declaration, remove_service_declaration
from service_scan.errors import DeclarationError, TypeSourceError

from scan_fixtures.exported import PublicService
from scan_fixtures.filtering import AbstractGreeter, PlainHelper


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove SERVICE_SCAN_ variables set outside the tests."""
    for key in list(os.environ):
        if key.startswith("SERVICE_SCAN_"):
            monkeypatch.delenv(key)


@pytest.fixture
def plain_helper_undeclared():
    """Drop the declaration configured for PlainHelper after the test."""
    yield
    remove_service_declaration(PlainHelper)


def make_bootstrap(tmp_path, content):
    path = tmp_path / "service-scan.yaml"
    path.write_text(content)
    return ScanBootstrap(
        config_path=path,
        user_config_path=tmp_path / "user.yaml",
        project_config_path=tmp_path / "project.yaml",
        configure_logs=False,
    )


CONFIG = """
sources:
  - scan_fixtures.exported
  - scan_fixtures.filtering
services:
  "scan_fixtures.filtering:PlainHelper":
    lifetime: transient
    registration: self
"""


class TestScanBootstrap:
    """Test bootstrapping a provider from configuration."""

    def test_initialize(self, tmp_path, plain_helper_undeclared):
        """Test configured sources are scanned and configured declarations applied."""
        bootstrap = make_bootstrap(tmp_path, CONFIG)
        provider = bootstrap.initialize()

        assert get_service_declaration(PlainHelper).lifetime == Lifetime.TRANSIENT
        assert isinstance(provider.get_required_service(PublicService), PublicService)
        assert provider.get_required_service(AbstractGreeter).greet() == "hello"
        assert bootstrap.get_service(PlainHelper) is not bootstrap.get_service(PlainHelper)

    def test_initialize_is_idempotent(self, tmp_path, plain_helper_undeclared):
        """Test initializing twice returns the same provider."""
        bootstrap = make_bootstrap(tmp_path, CONFIG)
        assert bootstrap.initialize() is bootstrap.initialize()
        assert len(bootstrap.services.descriptors_for(PlainHelper)) == 1

    def test_status(self, tmp_path, plain_helper_undeclared):
        """Test status reporting."""
        bootstrap = make_bootstrap(tmp_path, CONFIG)
        assert bootstrap.get_status()["initialized"] is False

        bootstrap.initialize()
        status = bootstrap.get_status()
        assert status["initialized"] is True
        assert status["descriptors_count"] == len(bootstrap.services)
        assert status["configurators_applied"] == 0

    def test_provider_requires_initialize(self, tmp_path):
        """Test the provider is unavailable before initialization."""
        bootstrap = make_bootstrap(tmp_path, "sources: []\n")
        with pytest.raises(RuntimeError):
            bootstrap.provider

    def test_no_sources(self, tmp_path, log_messages):
        """Test an empty configuration builds an empty provider."""
        bootstrap = make_bootstrap(tmp_path, "logging:\n  level: INFO\n")
        bootstrap.initialize()

        assert len(bootstrap.services) == 0
        assert any("No sources configured" in m for m in log_messages)

    def test_unknown_service_reference(self, tmp_path):
        """Test a configured class that cannot be imported fails start-up."""
        bootstrap = make_bootstrap(tmp_path, 'services:\n  "scan_fixtures.filtering:Missing": {}\n')
        with pytest.raises(TypeSourceError) as exc_info:
            bootstrap.initialize()
        assert exc_info.value.source == "scan_fixtures.filtering:Missing"

    def test_invalid_declaration(self, tmp_path):
        """Test malformed configured declarations fail start-up."""
        bootstrap = make_bootstrap(
            tmp_path, 'services:\n  "scan_fixtures.filtering:PlainHelper":\n    lifetime: forever\n'
        )
        with pytest.raises(DeclarationError):
            bootstrap.initialize()
        assert get_service_declaration(PlainHelper) is None

    def test_shutdown(self, tmp_path, plain_helper_undeclared):
        """Test shutdown resets the bootstrap."""
        bootstrap = make_bootstrap(tmp_path, CONFIG)
        bootstrap.initialize()
        bootstrap.shutdown()

        assert bootstrap.get_status()["initialized"] is False
        with pytest.raises(RuntimeError):
            bootstrap.provider

    def test_restart_after_shutdown(self, tmp_path, plain_helper_undeclared):
        """Test initializing after shutdown rebuilds without duplicate registrations."""
        bootstrap = make_bootstrap(tmp_path, CONFIG)
        bootstrap.initialize()
        count = len(bootstrap.services)
        bootstrap.shutdown()

        provider = bootstrap.initialize()
        assert len(bootstrap.services) == count
        assert len(bootstrap.services.descriptors_for(PublicService)) == 1
        assert isinstance(provider.get_required_service(PublicService), PublicService)

    def test_restart_with_caller_collection_rejected(self, tmp_path):
        """Test a caller-owned collection is never scanned twice."""
        path = tmp_path / "service-scan.yaml"
        path.write_text("sources: [scan_fixtures.exported]\n")
        services = ServiceCollection()
        bootstrap = ScanBootstrap(
            config_path=path,
            user_config_path=tmp_path / "user.yaml",
            project_config_path=tmp_path / "project.yaml",
            services=services,
            configure_logs=False,
        )
        bootstrap.initialize()
        bootstrap.shutdown()

        with pytest.raises(RuntimeError):
            bootstrap.initialize()
        assert len(services) == 1
