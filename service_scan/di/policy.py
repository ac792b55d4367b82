"""Registration policy: which contract types a declared service is bound to."""

import abc
import inspect
import typing
from typing import List, Sequence, Type

from .decorators import RegistrationMode

_NEVER_CONTRACTS = frozenset({object, typing.Protocol, typing.Generic, abc.ABC})


def is_protocol(cls: Type) -> bool:
    """Whether ``cls`` is a ``typing.Protocol`` class (not an implementation of one)."""
    return inspect.isclass(cls) and bool(getattr(cls, "_is_protocol", False))


def is_interface(cls: Type) -> bool:
    """Whether ``cls`` can serve as a contract: a Protocol or an abstract class."""
    if not inspect.isclass(cls) or cls in _NEVER_CONTRACTS:
        return False
    return is_protocol(cls) or inspect.isabstract(cls)


def get_interfaces(cls: Type) -> List[Type]:
    """Get the interfaces implemented by a class, directly or transitively.

    Interfaces are listed in MRO order, which is deterministic for a given
    class hierarchy.
    """
    return [base for base in inspect.getmro(cls)[1:] if is_interface(base)]


def resolve_contracts(
    implementation_type: Type,
    registration: RegistrationMode = RegistrationMode.INTERFACES,
    types_to_register: Sequence[Type] = (),
) -> List[Type]:
    """Resolve the contract types an implementation is registered under.

    Args:
        implementation_type: Concrete class being registered
        registration: Policy flags, ignored when ``types_to_register`` is given
        types_to_register: Explicit contracts, returned verbatim when non-empty

    Returns:
        Ordered contract types; never empty

    Example:
        >>> class Greeter(Protocol):
        ...     def greet(self) -> str: ...
        >>> class English(Greeter):
        ...     def greet(self) -> str: return "hello"
        >>> resolve_contracts(English, RegistrationMode.ALL)
        [Greeter, English]
    """
    if types_to_register:
        return list(types_to_register)

    contracts: List[Type] = []
    if RegistrationMode.INTERFACES in registration:
        contracts.extend(get_interfaces(implementation_type))

    # Falls back to the class itself so a declaration never registers nothing
    if not contracts or RegistrationMode.SELF in registration:
        contracts.append(implementation_type)

    return contracts
