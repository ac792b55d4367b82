"""Convention-based service registration for dependency injection.

Classes opt into registration with ``@service`` or by implementing
``ServiceConfigurator``; scanning a module, package or class list registers
them into a ``ServiceCollection``:

```python
services = scan_one(ServiceCollection(), "myapp.services")
provider = services.build_provider()
repo = provider.get_required_service(OrderRepository)
```

Log records from this package are disabled until ``configure_logging`` is
called or ``logger.enable("service_scan")`` is used.
"""

from loguru import logger

from .bootstrap import ScanBootstrap
from .di import (
    Classification,
    Lifetime,
    ModuleTypeSource,
    PackageTypeSource,
    RegistrationMode,
    ServiceCollection,
    ServiceConfigurator,
    ServiceDeclaration,
    ServiceDescriptor,
    ServiceProvider,
    ServiceScanner,
    ServiceScope,
    TypeListSource,
    TypeSource,
    apply_configurator,
    apply_configurators,
    declare_service,
    get_service_declaration,
    resolve_contracts,
    scan_many,
    scan_one,
    service,
)
from .errors import (
    ConfigurationError,
    ConfiguratorError,
    DeclarationError,
    PreconditionError,
    ResolutionError,
    ServiceScanError,
    TypeSourceError,
)
from .logging_utils import configure_logging

logger.disable("service_scan")

__version__ = "0.1.0"

__all__ = [
    "ScanBootstrap",
    "Classification",
    "Lifetime",
    "ModuleTypeSource",
    "PackageTypeSource",
    "RegistrationMode",
    "ServiceCollection",
    "ServiceConfigurator",
    "ServiceDeclaration",
    "ServiceDescriptor",
    "ServiceProvider",
    "ServiceScanner",
    "ServiceScope",
    "TypeListSource",
    "TypeSource",
    "apply_configurator",
    "apply_configurators",
    "declare_service",
    "get_service_declaration",
    "resolve_contracts",
    "scan_many",
    "scan_one",
    "service",
    "ConfigurationError",
    "ConfiguratorError",
    "DeclarationError",
    "PreconditionError",
    "ResolutionError",
    "ServiceScanError",
    "TypeSourceError",
    "configure_logging",
]
