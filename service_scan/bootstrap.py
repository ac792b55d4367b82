"""Composition-root bootstrap driven by configuration.

The bootstrap process follows this order:
1. Configuration loading and validation
2. Logging setup
3. Declarations from the ``services`` configuration section
4. Scanning of the configured ``sources``
5. Provider construction
"""

from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

from loguru import logger

from .config.manager import ConfigurationManager
from .config.validator import ScanSettings
from .di.collection import ServiceCollection
from .di.decorators import ServiceDeclaration, declare_service
from .di.provider import ServiceProvider
from .di.scanner import ServiceScanner
from .di.sources import import_class
from .errors import TypeSourceError
from .logging_utils import configure_logging

T = TypeVar("T")


class ScanBootstrap:
    """Builds a service provider from configuration.

    Example:
        bootstrap = ScanBootstrap(config_path=Path("service-scan.yaml"))
        provider = bootstrap.initialize()
        repo = provider.get_required_service(OrderRepository)
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        user_config_path: Optional[Path] = None,
        project_config_path: Optional[Path] = None,
        *,
        services: Optional[ServiceCollection] = None,
        configure_logs: bool = True,
    ):
        """Initialize bootstrap.

        Args:
            config_path: Explicit config file path
            user_config_path: User config file path
            project_config_path: Project config file path
            services: Collection to scan into; a new one is created by default
            configure_logs: Whether to install the configured log level
        """
        self.config_manager = ConfigurationManager(
            user_config_path=user_config_path,
            project_config_path=project_config_path,
            config_path=config_path,
        )
        self.configure_logs = configure_logs

        self._owns_services = services is None
        self._services = services if services is not None else ServiceCollection()
        self._provider: Optional[ServiceProvider] = None
        self._scanner: Optional[ServiceScanner] = None
        self._initialized = False
        self._shut_down = False

    def initialize(self) -> ServiceProvider:
        """Load configuration, register services and build the provider.

        Returns:
            The configured provider

        Raises:
            ConfigurationError: If the configuration is invalid
            DeclarationError: If a configured declaration is malformed
            TypeSourceError: If a configured class or source cannot be imported
            ConfiguratorError: If a scanned configurator cannot be created
            RuntimeError: If a bootstrap scanning into a caller-owned collection
                is initialized again after shutdown
        """
        if self._initialized:
            return self._provider
        if self._shut_down and not self._owns_services:
            raise RuntimeError(
                "Bootstrap was shut down; create a new ScanBootstrap to rescan into a caller-owned collection"
            )

        settings = self.config_manager.load_settings()

        if self.configure_logs:
            configure_logging(settings.logging.level)

        self._declare_services(settings)
        self._scan_sources(settings)

        self._provider = self._services.build_provider()
        self._initialized = True

        logger.info(f"Bootstrap complete: {len(self._services)} descriptors registered")
        return self._provider

    def _declare_services(self, settings: ScanSettings) -> None:
        """Attach the declarations listed in the configuration."""
        for reference, raw in settings.services.items():
            try:
                cls = import_class(reference)
            except (ImportError, AttributeError, TypeError) as e:
                raise TypeSourceError.import_failed(reference, e) from e

            declare_service(cls, ServiceDeclaration.from_mapping(raw or {}))

    def _scan_sources(self, settings: ScanSettings) -> None:
        """Scan the configured sources into the collection."""
        if not settings.sources:
            logger.warning("No sources configured; nothing will be scanned")
            return

        self._scanner = ServiceScanner(self._services, recursive=settings.recursive)
        self._scanner.scan_many(settings.sources)
        logger.debug("\n" + self._scanner.generate_report())

    @property
    def services(self) -> ServiceCollection:
        """The collection scanned into."""
        return self._services

    @property
    def provider(self) -> ServiceProvider:
        """The provider built by ``initialize``."""
        if not self._initialized:
            raise RuntimeError("Bootstrap not initialized. Call initialize() first.")
        return self._provider

    def get_service(self, service_type: Type[T]) -> T:
        """Resolve a required service from the bootstrapped provider."""
        return self.provider.get_required_service(service_type)

    def get_status(self) -> Dict[str, Any]:
        """Get bootstrap status information."""
        status: Dict[str, Any] = {
            "initialized": self._initialized,
            "descriptors_count": len(self._services),
            "service_types_count": len(self._services.service_types()),
        }
        if self._scanner:
            status["configurators_applied"] = len(self._scanner.applied_configurators)
        return status

    def shutdown(self) -> None:
        """Dispose the root provider's scoped instances.

        A bootstrap that created its own collection starts from a fresh one
        when initialized again.
        """
        if self._provider:
            self._provider.dispose()
        self._provider = None
        self._scanner = None
        self._initialized = False
        self._shut_down = True
        if self._owns_services:
            self._services = ServiceCollection()
