"""Service declarations and the decorator used to opt classes into scanning.

A class opts into automatic registration by carrying a ``ServiceDeclaration``:

```python
@service(lifetime=Lifetime.SCOPED)
class SqlOrderRepository(OrderRepository):
    ...
```

Declarations are kept in an explicit table keyed by class, filled either by
the ``@service`` decorator at import time or by ``declare_service`` from a
composition root (for example from configuration). Scanning only reads this
table; it never inspects class attributes.
"""

import inspect
from enum import Flag
from threading import Lock
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Type, TypeVar, Union
from weakref import WeakKeyDictionary

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import DeclarationError
from .collection import Lifetime

T = TypeVar("T")


class RegistrationMode(Flag):
    """Which contract types a declared service is registered under."""
    INTERFACES = 1
    SELF = 2
    ALL = INTERFACES | SELF

    @classmethod
    def parse(cls, value: Any) -> "RegistrationMode":
        """Parse a mode from a member, an int, a name or a ``|``-separated string.

        Example:
            >>> RegistrationMode.parse("interfaces|self") is RegistrationMode.ALL
            True
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid registration mode: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            names = [part.strip() for part in value.split("|") if part.strip()]
        elif isinstance(value, Iterable):
            names = list(value)
        else:
            raise ValueError(f"Invalid registration mode: {value!r}")

        mode = cls(0)
        for name in names:
            if not isinstance(name, str) or name.upper() not in cls.__members__:
                raise ValueError(
                    f"Unknown registration mode {name!r}; "
                    f"expected one of {', '.join(m.lower() for m in cls.__members__)}"
                )
            mode |= cls[name.upper()]
        return mode


class ServiceDeclaration(BaseModel):
    """Immutable declaration attached to a class that opts into scanning.

    Attributes:
        lifetime: Lifetime of every registration made for the class
        registration: Contract policy used when ``types_to_register`` is empty
        try_add: Only register a contract that has no registration yet
        types_to_register: Explicit contracts; overrides ``registration``
    """
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    lifetime: Lifetime = Lifetime.SINGLETON
    registration: RegistrationMode = RegistrationMode.INTERFACES
    try_add: bool = False
    types_to_register: Tuple[type, ...] = ()

    @field_validator("lifetime", mode="before")
    @classmethod
    def _parse_lifetime(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("registration", mode="before")
    @classmethod
    def _parse_registration(cls, value: Any) -> RegistrationMode:
        return RegistrationMode.parse(value)

    @field_validator("types_to_register", mode="before")
    @classmethod
    def _parse_types(cls, value: Any) -> Tuple[Any, ...]:
        from .sources import import_class

        if value is None:
            return ()
        if isinstance(value, (str, type)):
            value = [value]

        types = []
        for item in value:
            if isinstance(item, str):
                try:
                    item = import_class(item)
                except (ImportError, AttributeError, TypeError) as e:
                    raise ValueError(f"Cannot import contract {item!r}: {e}") from e
            elif not inspect.isclass(item):
                raise ValueError(f"Contract {item!r} is not a class")
            types.append(item)
        return tuple(types)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ServiceDeclaration":
        """Build a declaration from raw metadata such as a configuration section.

        Args:
            raw: Mapping of declaration fields; class references may be given
                as ``"package.module:ClassName"`` strings

        Returns:
            The validated declaration

        Raises:
            DeclarationError: If the mapping has unknown fields or invalid values
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise DeclarationError.invalid(f"expected a mapping, got {type(raw).__name__}")

        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            raise DeclarationError.invalid(str(e), cause=e) from e


# Explicit declaration table; weak keys let locally defined classes be collected
_declarations: "WeakKeyDictionary[type, ServiceDeclaration]" = WeakKeyDictionary()
_declarations_lock = Lock()


def declare_service(cls: Type[T], declaration: ServiceDeclaration) -> Type[T]:
    """Attach a declaration to a class.

    Re-declaring a class with an equal declaration is a no-op; a different
    declaration for an already declared class is rejected.

    Args:
        cls: The implementation class
        declaration: Its declaration

    Returns:
        The class (for chaining)

    Raises:
        DeclarationError: If the class is not a class or is already declared
            differently
    """
    if not inspect.isclass(cls):
        raise DeclarationError.invalid(f"{cls!r} is not a class")
    if not isinstance(declaration, ServiceDeclaration):
        raise DeclarationError.invalid(f"{declaration!r} is not a ServiceDeclaration")

    with _declarations_lock:
        existing = _declarations.get(cls)
        if existing is not None:
            if existing == declaration:
                return cls
            raise DeclarationError.duplicate(cls)
        _declarations[cls] = declaration

    logger.debug(
        f"Declared service {cls.__name__} "
        f"(lifetime={declaration.lifetime.value}, registration={declaration.registration}, "
        f"try_add={declaration.try_add})"
    )
    return cls


def get_service_declaration(cls: Type) -> Optional[ServiceDeclaration]:
    """Get the declaration for a class.

    The class MRO is walked and the first declaration found wins, so a
    subclass inherits its base's declaration unless it declares its own.
    """
    if not inspect.isclass(cls):
        return None
    for klass in inspect.getmro(cls):
        declaration = _declarations.get(klass)
        if declaration is not None:
            return declaration
    return None


def remove_service_declaration(cls: Type) -> bool:
    """Remove a class's own declaration.

    Returns:
        True if a declaration was removed
    """
    with _declarations_lock:
        return _declarations.pop(cls, None) is not None


def service(
    cls: Optional[Type[T]] = None,
    *,
    lifetime: Union[Lifetime, str] = Lifetime.SINGLETON,
    registration: Union[RegistrationMode, str] = RegistrationMode.INTERFACES,
    try_add: bool = False,
    types_to_register: Optional[Union[Type, Iterable[Type]]] = None,
) -> Union[Type[T], Callable[[Type[T]], Type[T]]]:
    """
    Decorator marking a class for registration by the scanner.

    Supports both ``@service`` and ``@service(...)``.

    Args:
        lifetime: Lifetime of the registrations (singleton by default)
        registration: Contracts to register under when ``types_to_register``
            is not given (implemented interfaces by default)
        try_add: Skip contracts that are already registered
        types_to_register: Explicit contract type(s)

    Raises:
        DeclarationError: If the arguments are invalid or the class is
            already declared
    """
    declaration = ServiceDeclaration.from_mapping({
        "lifetime": lifetime,
        "registration": registration,
        "try_add": try_add,
        "types_to_register": types_to_register,
    })

    def decorator(cls: Type[T]) -> Type[T]:
        return declare_service(cls, declaration)

    if cls is None:
        # Called with parameters: @service(...)
        return decorator
    else:
        # Called without parameters: @service
        return decorator(cls)
