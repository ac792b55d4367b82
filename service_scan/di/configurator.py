"""Service configurators: classes that register services imperatively.

A configurator is picked up by the scanner like a declared service, but
instead of being registered itself it is instantiated and asked to configure
the collection:

```python
class MessagingConfigurator(ServiceConfigurator):
    def configure(self, services: ServiceCollection) -> None:
        services.add_singleton(MessageBus, InMemoryMessageBus)
```
"""

import inspect
from abc import ABC, abstractmethod
from typing import Iterable, Type, Union

from loguru import logger

from ..errors import ConfiguratorError, PreconditionError
from .collection import ServiceCollection


class ServiceConfigurator(ABC):
    """Registers services directly into a collection."""

    @abstractmethod
    def configure(self, services: ServiceCollection) -> None:
        """Register services.

        Args:
            services: The collection to register into
        """


def is_configurator_type(cls: Type) -> bool:
    """Whether a class implements ``ServiceConfigurator``."""
    return inspect.isclass(cls) and issubclass(cls, ServiceConfigurator)


def create_configurator(cls: Type[ServiceConfigurator]) -> ServiceConfigurator:
    """Default-construct a configurator class.

    Raises:
        ConfiguratorError: If the class is not a configurator or its
            constructor fails
    """
    if not is_configurator_type(cls):
        raise ConfiguratorError.not_a_configurator(cls)
    try:
        return cls()
    except Exception as e:
        raise ConfiguratorError.construction_failed(cls, e) from e


def apply_configurator(
    services: ServiceCollection,
    configurator: Union[ServiceConfigurator, Type[ServiceConfigurator]],
) -> ServiceCollection:
    """Apply a single configurator instance or class to a collection.

    Returns:
        The collection (for chaining)
    """
    if services is None:
        raise PreconditionError.missing_argument("services")
    if configurator is None:
        raise PreconditionError.missing_argument("configurator")

    if inspect.isclass(configurator):
        configurator = create_configurator(configurator)
    elif not isinstance(configurator, ServiceConfigurator):
        raise ConfiguratorError.not_a_configurator(configurator)

    before = len(services)
    configurator.configure(services)
    logger.debug(
        f"Applied configurator {type(configurator).__name__} "
        f"({len(services) - before} descriptors added)"
    )
    return services


def apply_configurators(
    services: ServiceCollection,
    configurators: Iterable[Union[ServiceConfigurator, Type[ServiceConfigurator]]],
) -> ServiceCollection:
    """Apply configurators in order.

    Returns:
        The collection (for chaining)
    """
    if services is None:
        raise PreconditionError.missing_argument("services")
    if configurators is None:
        raise PreconditionError.missing_argument("configurators")

    for configurator in configurators:
        apply_configurator(services, configurator)
    return services
