"""Dependency injection registration by convention.

This module provides:
- The ``@service`` declaration and the declaration table
- The registration policy deciding which contracts a service is bound to
- Type sources and the scanner that registers what it finds
- Service configurators for imperative registration
- A service collection and provider with singleton/scoped/transient lifetimes
"""

from .collection import Lifetime, ServiceCollection, ServiceDescriptor
from .configurator import (
    ServiceConfigurator,
    apply_configurator,
    apply_configurators,
    create_configurator,
    is_configurator_type,
)
from .decorators import (
    RegistrationMode,
    ServiceDeclaration,
    declare_service,
    get_service_declaration,
    remove_service_declaration,
    service,
)
from .policy import get_interfaces, is_interface, resolve_contracts
from .provider import ServiceProvider, ServiceScope
from .scanner import Classification, ServiceScanner, classify, scan_many, scan_one
from .sources import (
    ModuleTypeSource,
    PackageTypeSource,
    TypeListSource,
    TypeSource,
    as_type_source,
    import_class,
    is_concrete_class,
)

__all__ = [
    # Container
    "Lifetime",
    "ServiceCollection",
    "ServiceDescriptor",
    "ServiceProvider",
    "ServiceScope",

    # Declarations
    "RegistrationMode",
    "ServiceDeclaration",
    "service",
    "declare_service",
    "get_service_declaration",
    "remove_service_declaration",

    # Policy
    "resolve_contracts",
    "get_interfaces",
    "is_interface",

    # Configurators
    "ServiceConfigurator",
    "apply_configurator",
    "apply_configurators",
    "create_configurator",
    "is_configurator_type",

    # Scanning
    "Classification",
    "ServiceScanner",
    "classify",
    "scan_one",
    "scan_many",

    # Type sources
    "TypeSource",
    "ModuleTypeSource",
    "PackageTypeSource",
    "TypeListSource",
    "as_type_source",
    "import_class",
    "is_concrete_class",
]
