"""Service collection: the ordered registry of service descriptors.

A ``ServiceCollection`` is what scanning and configurators write into. It keeps
every descriptor in registration order, so several implementations of the same
service type can coexist; a provider built from it resolves the last one for
single resolution and all of them for ``get_services``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Type, TypeVar, TYPE_CHECKING

from loguru import logger

from ..errors import PreconditionError

if TYPE_CHECKING:
    from .provider import ServiceProvider

T = TypeVar("T")


class Lifetime(Enum):
    """Service lifecycle scopes."""
    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class ServiceDescriptor:
    """A resolved binding of a service type to how it is produced.

    Exactly one of ``implementation_type``, ``factory`` or ``instance`` is set.
    Factories receive the resolving ``ServiceProvider``.
    """
    service_type: Type
    implementation_type: Optional[Type] = None
    lifetime: Lifetime = Lifetime.TRANSIENT
    factory: Optional[Callable[["ServiceProvider"], Any]] = None
    instance: Any = None

    def __post_init__(self):
        provided = [
            self.implementation_type is not None,
            self.factory is not None,
            self.instance is not None,
        ]
        if sum(provided) != 1:
            raise PreconditionError(
                "Provide exactly one of implementation_type, factory or instance "
                f"for {getattr(self.service_type, '__name__', self.service_type)}",
                argument="implementation_type",
            )
        if self.instance is not None and self.lifetime != Lifetime.SINGLETON:
            raise PreconditionError(
                "Instance registrations are always singletons",
                argument="lifetime",
            )

    @classmethod
    def for_type(
        cls,
        service_type: Type,
        implementation_type: Optional[Type] = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> "ServiceDescriptor":
        """Describe a class binding, defaulting the implementation to the service type."""
        return cls(service_type, implementation_type or service_type, lifetime)

    def __repr__(self) -> str:
        if self.implementation_type is not None:
            target = self.implementation_type.__name__
        elif self.factory is not None:
            target = f"factory {getattr(self.factory, '__name__', self.factory)!s}"
        else:
            target = f"instance of {type(self.instance).__name__}"
        name = getattr(self.service_type, "__name__", repr(self.service_type))
        return f"ServiceDescriptor({name} -> {target}, {self.lifetime.value})"


class ServiceCollection:
    """Ordered, mutable collection of service descriptors."""

    def __init__(self):
        """Initialize an empty collection."""
        self._descriptors: List[ServiceDescriptor] = []

    def add(self, descriptor: ServiceDescriptor) -> "ServiceCollection":
        """Append a descriptor, even if its service type is already registered.

        Args:
            descriptor: The descriptor to append

        Returns:
            The collection (for chaining)
        """
        if descriptor is None:
            raise PreconditionError.missing_argument("descriptor")

        self._descriptors.append(descriptor)
        logger.debug(f"Added {descriptor!r}")
        return self

    def try_add(self, descriptor: ServiceDescriptor) -> bool:
        """Append a descriptor only if its service type is not yet registered.

        Args:
            descriptor: The descriptor to append

        Returns:
            True if the descriptor was added
        """
        if descriptor is None:
            raise PreconditionError.missing_argument("descriptor")

        if self.contains(descriptor.service_type):
            logger.debug(f"Skipped {descriptor!r}: service type already registered")
            return False

        self._descriptors.append(descriptor)
        logger.debug(f"Added {descriptor!r}")
        return True

    def add_singleton(
        self,
        service_type: Type[T],
        implementation: Optional[Type[T]] = None,
        *,
        factory: Optional[Callable[["ServiceProvider"], T]] = None,
    ) -> "ServiceCollection":
        """Register a singleton service."""
        return self._add_with_lifetime(service_type, implementation, factory, Lifetime.SINGLETON)

    def add_scoped(
        self,
        service_type: Type[T],
        implementation: Optional[Type[T]] = None,
        *,
        factory: Optional[Callable[["ServiceProvider"], T]] = None,
    ) -> "ServiceCollection":
        """Register a scoped service."""
        return self._add_with_lifetime(service_type, implementation, factory, Lifetime.SCOPED)

    def add_transient(
        self,
        service_type: Type[T],
        implementation: Optional[Type[T]] = None,
        *,
        factory: Optional[Callable[["ServiceProvider"], T]] = None,
    ) -> "ServiceCollection":
        """Register a transient service."""
        return self._add_with_lifetime(service_type, implementation, factory, Lifetime.TRANSIENT)

    def add_instance(self, service_type: Type[T], instance: T) -> "ServiceCollection":
        """Register an existing instance (always singleton)."""
        return self.add(ServiceDescriptor(service_type, lifetime=Lifetime.SINGLETON, instance=instance))

    def _add_with_lifetime(self, service_type, implementation, factory, lifetime):
        if service_type is None:
            raise PreconditionError.missing_argument("service_type")

        if factory is not None:
            if implementation is not None:
                raise PreconditionError(
                    "Provide either an implementation or a factory, not both",
                    argument="factory",
                )
            return self.add(ServiceDescriptor(service_type, lifetime=lifetime, factory=factory))
        return self.add(ServiceDescriptor.for_type(service_type, implementation, lifetime))

    def contains(self, service_type: Type) -> bool:
        """Check if any descriptor is registered for a service type."""
        return any(d.service_type == service_type for d in self._descriptors)

    def descriptors_for(self, service_type: Type) -> List[ServiceDescriptor]:
        """Get all descriptors for a service type, in registration order."""
        return [d for d in self._descriptors if d.service_type == service_type]

    def service_types(self) -> List[Type]:
        """List the distinct registered service types, in first-registration order."""
        seen = []
        for descriptor in self._descriptors:
            if descriptor.service_type not in seen:
                seen.append(descriptor.service_type)
        return seen

    def clear(self) -> None:
        """Remove all descriptors."""
        self._descriptors.clear()

    def build_provider(self) -> "ServiceProvider":
        """Build a provider over a snapshot of the current descriptors."""
        from .provider import ServiceProvider

        return ServiceProvider(list(self._descriptors))

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(list(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, service_type: object) -> bool:
        return self.contains(service_type)

    def __repr__(self) -> str:
        return f"ServiceCollection({len(self._descriptors)} descriptors)"
