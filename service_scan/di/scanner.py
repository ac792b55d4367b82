"""Service scanner for automatic discovery and registration.

This module scans type sources (modules, packages or class lists) for
configurators and declared services and registers them into a
``ServiceCollection``.
"""

from collections import defaultdict
from enum import Enum
from types import ModuleType
from typing import Any, Dict, Iterable, List, Set, Type

from loguru import logger

from ..errors import PreconditionError
from .collection import ServiceCollection, ServiceDescriptor
from .configurator import create_configurator, is_configurator_type
from .decorators import get_service_declaration
from .policy import resolve_contracts
from .sources import TypeSource, as_type_source


class Classification(Enum):
    """How the scanner treats a candidate class."""
    CONFIGURATOR = "configurator"
    DECLARED = "declared"
    IGNORED = "ignored"


def classify(cls: Type) -> Classification:
    """Classify a class; configurators take priority over declarations."""
    if is_configurator_type(cls):
        return Classification.CONFIGURATOR
    if get_service_declaration(cls) is not None:
        return Classification.DECLARED
    return Classification.IGNORED


class ServiceScanner:
    """Scanner registering configurators and declared services into a collection."""

    def __init__(self, services: ServiceCollection, recursive: bool = True):
        """Initialize the scanner.

        Args:
            services: The collection to register into
            recursive: Whether packages given by name or module are walked
        """
        if services is None:
            raise PreconditionError.missing_argument("services")
        self.services = services
        self.recursive = recursive
        self.applied_configurators: List[Type] = []
        self.registered: List[ServiceDescriptor] = []
        self.skipped: List[ServiceDescriptor] = []
        self._seen_configurators: Set[Type] = set()

    def scan(self, source: Any) -> ServiceCollection:
        """Scan a single source.

        Args:
            source: A module, dotted module name, class iterable or TypeSource

        Returns:
            The collection (for chaining)
        """
        if source is None:
            raise PreconditionError.missing_argument("source")
        return self.scan_many([source])

    def scan_many(self, sources: Iterable[Any]) -> ServiceCollection:
        """Scan several sources in the given order.

        Args:
            sources: Sources to scan; see ``scan``

        Returns:
            The collection (for chaining)
        """
        if sources is None:
            raise PreconditionError.missing_argument("sources")
        if isinstance(sources, (str, ModuleType)):
            sources = [sources]
        sources = list(sources)
        if any(s is None for s in sources):
            raise PreconditionError.missing_argument("sources[]")

        self._seen_configurators = set()
        for source in sources:
            self._scan_source(as_type_source(source, recursive=self.recursive))
        return self.services

    def _scan_source(self, source: TypeSource) -> None:
        logger.info(f"Scanning {source.name}")
        before = len(self.services)

        for cls in source.exported_types():
            kind = classify(cls)
            if kind is Classification.CONFIGURATOR:
                self._apply_configurator(cls)
            elif kind is Classification.DECLARED:
                self._register_declared(cls)

        logger.info(f"Scanned {source.name}: {len(self.services) - before} descriptors added")

    def _apply_configurator(self, cls: Type) -> None:
        if cls in self._seen_configurators:
            logger.warning(f"Configurator {cls.__name__} already applied in this scan, skipping")
            return
        self._seen_configurators.add(cls)

        configurator = create_configurator(cls)
        configurator.configure(self.services)
        self.applied_configurators.append(cls)
        logger.debug(f"Applied configurator {cls.__name__}")

    def _register_declared(self, cls: Type) -> None:
        declaration = get_service_declaration(cls)
        contracts = resolve_contracts(cls, declaration.registration, declaration.types_to_register)

        for contract in contracts:
            descriptor = ServiceDescriptor(contract, cls, declaration.lifetime)
            if declaration.try_add:
                added = self.services.try_add(descriptor)
            else:
                self.services.add(descriptor)
                added = True

            if added:
                self.registered.append(descriptor)
            else:
                self.skipped.append(descriptor)

    def generate_report(self) -> str:
        """Generate a report of what the scanner registered.

        Returns:
            Report string
        """
        report = ["Service Scan Report", "=" * 50, ""]

        if self.applied_configurators:
            report.append(f"CONFIGURATORS ({len(self.applied_configurators)})")
            report.append("-" * 30)
            for cls in self.applied_configurators:
                report.append(f"  - {cls.__name__}")
            report.append("")

        by_implementation: Dict[Type, List[ServiceDescriptor]] = defaultdict(list)
        for descriptor in self.registered:
            by_implementation[descriptor.implementation_type].append(descriptor)

        if by_implementation:
            report.append(f"SERVICES ({len(by_implementation)})")
            report.append("-" * 30)
            for implementation in sorted(by_implementation, key=lambda c: c.__name__):
                descriptors = by_implementation[implementation]
                contracts = ", ".join(d.service_type.__name__ for d in descriptors)
                report.append(
                    f"  - {implementation.__name__} as {contracts} "
                    f"(lifetime: {descriptors[0].lifetime.value})"
                )
            report.append("")

        report.append("SUMMARY")
        report.append("-" * 30)
        report.append(f"Descriptors registered: {len(self.registered)}")
        report.append(f"Descriptors skipped (try_add): {len(self.skipped)}")

        return "\n".join(report)


def scan_one(services: ServiceCollection, source: Any, recursive: bool = True) -> ServiceCollection:
    """Scan one source into a collection.

    Args:
        services: The collection to register into
        source: A module, dotted module name, class iterable or TypeSource
        recursive: Whether packages are walked into their submodules

    Returns:
        The collection (for chaining)
    """
    return ServiceScanner(services, recursive=recursive).scan(source)


def scan_many(services: ServiceCollection, sources: Iterable[Any], recursive: bool = True) -> ServiceCollection:
    """Scan several sources into a collection, in the given order.

    Returns:
        The collection (for chaining)
    """
    return ServiceScanner(services, recursive=recursive).scan_many(sources)
