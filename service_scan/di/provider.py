"""Service provider: resolves instances from a built service collection.

The provider supports three lifecycles:
- singleton: one instance per root provider, shared by every scope
- scoped: one instance per scope (the root provider is its own scope)
- transient: a new instance on every resolution

Implementations are created by auto-wiring their constructor type hints.
"""

import inspect
import threading
import types
from collections import defaultdict
from typing import (
    Any, Dict, List, Optional, Sequence, Type, TypeVar, Union,
    get_args, get_origin, get_type_hints
)

from loguru import logger

from ..errors import PreconditionError, ResolutionError
from .collection import Lifetime, ServiceDescriptor

T = TypeVar("T")

# PEP 604 unions (X | None) have their own origin from Python 3.10
_UNION_TYPES = (Union, getattr(types, "UnionType", Union))


class ServiceProvider:
    """Resolves services registered in a ``ServiceCollection``."""

    def __init__(self, descriptors: Sequence[ServiceDescriptor], *, _root: Optional["ServiceProvider"] = None):
        """Initialize the provider.

        Args:
            descriptors: Descriptors in registration order
        """
        self._descriptors = list(descriptors)
        self._root = _root or self
        self._by_type: Dict[Any, List[ServiceDescriptor]] = defaultdict(list)
        for descriptor in self._descriptors:
            self._by_type[descriptor.service_type].append(descriptor)

        # Singletons live on the root only
        self._singletons: Dict[int, Any] = {}
        self._scoped: Dict[int, Any] = {}
        self._scoped_order: List[Any] = []
        self._lock = self._root._lock if _root else threading.RLock()
        self._resolving: List[Any] = self._root._resolving if _root else []
        self._disposed = False

    @property
    def is_root(self) -> bool:
        """Whether this provider is the root (not created by a scope)."""
        return self._root is self

    def get_service(self, service_type: Type[T]) -> Optional[T]:
        """Resolve the last registered implementation of a service type.

        Args:
            service_type: The type to resolve

        Returns:
            The resolved instance, or None if the type is not registered
        """
        if service_type is ServiceProvider:
            return self

        descriptors = self._by_type.get(service_type)
        if not descriptors:
            return None
        return self._resolve_descriptor(descriptors[-1])

    def get_required_service(self, service_type: Type[T]) -> T:
        """Resolve a service type, failing if it is not registered.

        Raises:
            ResolutionError: If no descriptor is registered for the type
        """
        if service_type is ServiceProvider:
            return self

        descriptors = self._by_type.get(service_type)
        if not descriptors:
            raise ResolutionError.not_registered(service_type)
        return self._resolve_descriptor(descriptors[-1])

    def get_services(self, service_type: Type[T]) -> List[T]:
        """Resolve every registered implementation of a service type.

        Returns:
            Instances in registration order (empty if none are registered)
        """
        return [self._resolve_descriptor(d) for d in self._by_type.get(service_type, [])]

    def has(self, service_type: Type) -> bool:
        """Check if a service type is registered."""
        return service_type is ServiceProvider or bool(self._by_type.get(service_type))

    def create_scope(self) -> "ServiceScope":
        """Create a new scope sharing this provider's singletons."""
        return ServiceScope(self._root)

    def _resolve_descriptor(self, descriptor: ServiceDescriptor) -> Any:
        if self._disposed:
            raise ResolutionError(
                "Cannot resolve services from a disposed scope",
                service_type=descriptor.service_type,
                error_code="RESOLUTION_SCOPE_DISPOSED",
            )

        with self._lock:
            if descriptor.lifetime == Lifetime.SINGLETON:
                cache = self._root._singletons
            elif descriptor.lifetime == Lifetime.SCOPED:
                cache = self._scoped
            else:
                return self._create(descriptor)

            key = id(descriptor)
            if key not in cache:
                instance = self._create(descriptor)
                cache[key] = instance
                if cache is self._scoped:
                    self._scoped_order.append(instance)
            return cache[key]

    def _create(self, descriptor: ServiceDescriptor) -> Any:
        if descriptor.instance is not None:
            return descriptor.instance

        target = descriptor.implementation_type or descriptor.factory
        if target in self._resolving:
            chain = " -> ".join(getattr(t, "__name__", repr(t)) for t in self._resolving + [target])
            raise ResolutionError(
                f"Circular dependency detected: {chain}",
                service_type=descriptor.service_type,
                error_code="RESOLUTION_CIRCULAR",
            )

        self._resolving.append(target)
        try:
            if descriptor.factory is not None:
                return descriptor.factory(self)
            return self.auto_wire(descriptor.implementation_type)
        finally:
            self._resolving.pop()

    def auto_wire(self, implementation: Type[T]) -> T:
        """Create an instance, injecting constructor dependencies.

        Args:
            implementation: The class to instantiate

        Returns:
            Instance with dependencies injected

        Raises:
            ResolutionError: If a required dependency cannot be satisfied
        """
        if implementation.__init__ is object.__init__:
            return implementation()

        sig = inspect.signature(implementation.__init__)
        try:
            hints = get_type_hints(implementation.__init__)
        except (NameError, TypeError) as e:
            logger.warning(f"Could not evaluate type hints of {implementation.__name__}: {e}")
            hints = {}

        kwargs = {}
        for param_name, param in list(sig.parameters.items())[1:]:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            param_type = hints.get(param_name, param.annotation)
            has_default = param.default is not param.empty

            if param_type is param.empty:
                if has_default:
                    continue
                raise ResolutionError(
                    f"Cannot resolve parameter '{param_name}' of {implementation.__name__}: "
                    "no type annotation",
                    service_type=implementation,
                    error_code="RESOLUTION_UNANNOTATED_PARAMETER",
                )

            origin = get_origin(param_type)

            # Optional[T]
            if origin in _UNION_TYPES:
                args = [a for a in get_args(param_type) if a is not type(None)]
                if len(args) == 1 and len(get_args(param_type)) == 2:
                    if self.has(args[0]):
                        kwargs[param_name] = self.get_required_service(args[0])
                    elif not has_default:
                        kwargs[param_name] = None
                    continue

            # List[T] collects every registration of T
            if origin in (list, List):
                args = get_args(param_type)
                if args:
                    kwargs[param_name] = self.get_services(args[0])
                    continue

            if self.has(param_type):
                kwargs[param_name] = self.get_required_service(param_type)
            elif not has_default:
                raise ResolutionError(
                    f"Cannot resolve dependency '{param_name}' of type "
                    f"{getattr(param_type, '__name__', param_type)} for {implementation.__name__}",
                    service_type=param_type,
                    error_code="RESOLUTION_MISSING_DEPENDENCY",
                )

        return implementation(**kwargs)

    def dispose(self) -> None:
        """Close scoped instances in reverse creation order and disable resolution."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            instances = list(reversed(self._scoped_order))
            self._scoped.clear()
            self._scoped_order.clear()

        for instance in instances:
            close = getattr(instance, "close", None)
            if callable(close):
                close()


class ServiceScope:
    """A resolution scope; use as a context manager.

    Example:
        with provider.create_scope() as scope:
            repo = scope.service_provider.get_required_service(Repository)
    """

    def __init__(self, root: ServiceProvider):
        """Initialize the scope over a root provider."""
        if root is None:
            raise PreconditionError.missing_argument("root")
        self.service_provider = ServiceProvider(root._descriptors, _root=root)

    def close(self) -> None:
        """Dispose the scope's provider."""
        self.service_provider.dispose()

    def __enter__(self) -> "ServiceScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
