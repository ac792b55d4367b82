"""Tests for service resolution and lifetimes."""

import sys
from typing import List, Optional

import pytest

from service_scan.di.collection import ServiceCollection
from service_scan.di.provider import ServiceProvider, ServiceScope
from service_scan.errors import ResolutionError

from service_mocks.for_attribute.scoped_mock_service import IScopedMockService
from service_mocks.for_attribute.singleton_mock_service import ISingletonMockService
from service_mocks.for_attribute.transient_mock_service import ITransientMockService
from service_mocks.for_configurator.mock_service_configurator import (
    IMockServiceConfiguratorService,
    MockServiceConfiguratorService,
)
from service_mocks.mock_service import IMockService


class Settings:
    pass


class Repository:
    def __init__(self, settings: Settings):
        self.settings = settings


class Handler:
    def __init__(self, repository: Repository, settings: Optional[Settings] = None, retries: int = 3):
        self.repository = repository
        self.settings = settings
        self.retries = retries


class Plugin:
    pass


class Reporter:
    def __init__(self, settings: "Settings | None", plugin: "Plugin | None"):
        self.settings = settings
        self.plugin = plugin


class PluginHost:
    def __init__(self, plugins: List[Plugin]):
        self.plugins = plugins


class Connection:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class Untyped:
    def __init__(self, value):
        self.value = value


class ChickenService:
    def __init__(self, egg: "EggService"):
        self.egg = egg


class EggService:
    def __init__(self, chicken: ChickenService):
        self.chicken = chicken


class TestScannedLifetimes:
    """Test lifetimes of the scanned mock services."""

    def test_singleton_shared_across_scopes(self, provider):
        """Test singletons are the same instance everywhere."""
        root_instance = provider.get_required_service(ISingletonMockService)
        with provider.create_scope() as scope:
            scoped_instance = scope.service_provider.get_required_service(ISingletonMockService)
        assert scoped_instance.id == root_instance.id

    def test_scoped_per_scope(self, provider):
        """Test scoped services are shared within a scope only."""
        with provider.create_scope() as first, provider.create_scope() as second:
            a1 = first.service_provider.get_required_service(IScopedMockService)
            a2 = first.service_provider.get_required_service(IScopedMockService)
            b = second.service_provider.get_required_service(IScopedMockService)

        assert a1.id == a2.id
        assert a1.id != b.id

    def test_transient_always_new(self, provider):
        """Test transient services are created on every resolution."""
        first = provider.get_required_service(ITransientMockService)
        second = provider.get_required_service(ITransientMockService)
        assert first.id != second.id

    def test_last_registration_wins(self, provider):
        """Test single resolution uses the last registration."""
        service = provider.get_required_service(IMockServiceConfiguratorService)
        assert isinstance(service, MockServiceConfiguratorService)

    def test_get_services_returns_all(self, provider):
        """Test every registration of a contract is resolved."""
        assert len(provider.get_services(IMockServiceConfiguratorService)) == 2
        assert len(provider.get_services(IMockService)) == 3


class TestServiceProvider:
    """Test provider resolution."""

    def setup_method(self):
        """Set up test environment."""
        self.services = ServiceCollection()

    def test_unregistered(self):
        """Test unregistered types resolve to None or fail when required."""
        provider = self.services.build_provider()
        assert provider.get_service(Settings) is None
        assert provider.get_services(Settings) == []
        assert not provider.has(Settings)

        with pytest.raises(ResolutionError) as exc_info:
            provider.get_required_service(Settings)
        assert exc_info.value.error_code == "RESOLUTION_NOT_REGISTERED"
        assert exc_info.value.service_type is Settings

    def test_resolves_itself(self):
        """Test the provider can be injected."""
        provider = self.services.build_provider()
        assert provider.get_service(ServiceProvider) is provider
        assert provider.has(ServiceProvider)

    def test_auto_wire(self):
        """Test constructor dependencies are injected by type hint."""
        self.services.add_singleton(Settings)
        self.services.add_transient(Repository)
        self.services.add_transient(Handler)
        provider = self.services.build_provider()

        handler = provider.get_required_service(Handler)
        assert handler.repository.settings is provider.get_required_service(Settings)
        assert handler.settings is handler.repository.settings
        assert handler.retries == 3

    def test_optional_dependency_missing(self):
        """Test unregistered optional dependencies are left at their default."""
        self.services.add_transient(Handler)
        self.services.add_instance(Repository, Repository(Settings()))
        handler = self.services.build_provider().get_required_service(Handler)
        assert handler.settings is None

    @pytest.mark.skipif(sys.version_info < (3, 10), reason="X | None needs Python 3.10")
    def test_pep604_optional_dependency(self):
        """Test X | None parameters resolve when registered and fall back to None otherwise."""
        self.services.add_singleton(Settings)
        self.services.add_transient(Reporter)
        provider = self.services.build_provider()

        reporter = provider.get_required_service(Reporter)
        assert reporter.settings is provider.get_required_service(Settings)
        assert reporter.plugin is None

    def test_list_dependency(self):
        """Test list parameters receive every registration."""
        self.services.add_singleton(Plugin)
        self.services.add_transient(Plugin)
        self.services.add_transient(PluginHost)

        host = self.services.build_provider().get_required_service(PluginHost)
        assert len(host.plugins) == 2

    def test_missing_dependency(self):
        """Test required dependencies must be registered."""
        self.services.add_transient(Repository)
        with pytest.raises(ResolutionError) as exc_info:
            self.services.build_provider().get_required_service(Repository)
        assert exc_info.value.error_code == "RESOLUTION_MISSING_DEPENDENCY"

    def test_unannotated_parameter(self):
        """Test parameters without hints or defaults cannot be resolved."""
        self.services.add_transient(Untyped)
        with pytest.raises(ResolutionError) as exc_info:
            self.services.build_provider().get_required_service(Untyped)
        assert exc_info.value.error_code == "RESOLUTION_UNANNOTATED_PARAMETER"

    def test_circular_dependency(self):
        """Test circular dependencies are detected."""
        self.services.add_transient(ChickenService)
        self.services.add_transient(EggService)
        with pytest.raises(ResolutionError) as exc_info:
            self.services.build_provider().get_required_service(ChickenService)
        assert exc_info.value.error_code == "RESOLUTION_CIRCULAR"

    def test_factory_receives_provider(self):
        """Test factories are called with the resolving provider."""
        self.services.add_singleton(Settings)
        self.services.add_scoped(Repository, factory=lambda sp: Repository(sp.get_required_service(Settings)))
        provider = self.services.build_provider()

        with provider.create_scope() as scope:
            repository = scope.service_provider.get_required_service(Repository)
        assert repository.settings is provider.get_required_service(Settings)

    def test_instance_registration(self):
        """Test registered instances are returned as is."""
        settings = Settings()
        self.services.add_instance(Settings, settings)
        assert self.services.build_provider().get_required_service(Settings) is settings


class TestServiceScope:
    """Test scope disposal."""

    def test_scope_closes_scoped_instances(self):
        """Test closing a scope closes its scoped instances."""
        services = ServiceCollection().add_scoped(Connection)
        provider = services.build_provider()

        scope = provider.create_scope()
        connection = scope.service_provider.get_required_service(Connection)
        assert isinstance(scope, ServiceScope)
        assert not scope.service_provider.is_root

        scope.close()
        assert connection.closed

    def test_disposed_scope_cannot_resolve(self):
        """Test resolving from a closed scope fails."""
        provider = ServiceCollection().add_scoped(Connection).build_provider()
        with provider.create_scope() as scope:
            pass

        with pytest.raises(ResolutionError) as exc_info:
            scope.service_provider.get_required_service(Connection)
        assert exc_info.value.error_code == "RESOLUTION_SCOPE_DISPOSED"

    def test_root_is_its_own_scope(self):
        """Test the root provider caches scoped services separately from scopes."""
        provider = ServiceCollection().add_scoped(Connection).build_provider()
        root_connection = provider.get_required_service(Connection)

        with provider.create_scope() as scope:
            assert scope.service_provider.get_required_service(Connection) is not root_connection
        assert provider.get_required_service(Connection) is root_connection
        assert not root_connection.closed

        provider.dispose()
        assert root_connection.closed
