"""Type sources: where the scanner finds candidate classes.

A type source yields the exported, concrete classes of some container of code:
a single module, a package walked recursively, or an explicit list of classes.
"""

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Any, Iterable, Iterator, List, Protocol, Type, runtime_checkable

from loguru import logger

from ..errors import PreconditionError, TypeSourceError
from .policy import is_protocol


@runtime_checkable
class TypeSource(Protocol):
    """Anything that can enumerate candidate classes for scanning."""

    @property
    def name(self) -> str: ...

    def exported_types(self) -> Iterator[Type]: ...


def is_concrete_class(cls: Any) -> bool:
    """Whether ``cls`` is a public class that can be instantiated."""
    return (
        inspect.isclass(cls)
        and not cls.__name__.startswith("_")
        and not inspect.isabstract(cls)
        and not is_protocol(cls)
    )


def import_class(reference: str) -> Type:
    """Import a class from ``"package.module:Qual.Name"`` or ``"package.module.Name"``.

    Raises:
        ImportError: If the module cannot be imported
        AttributeError: If the class does not exist in the module
        TypeError: If the reference does not name a class
    """
    if ":" in reference:
        module_name, qualname = reference.split(":", 1)
    else:
        module_name, _, qualname = reference.rpartition(".")
    if not module_name or not qualname:
        raise ImportError(f"Invalid class reference: {reference!r}")

    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)

    if not inspect.isclass(obj):
        raise TypeError(f"{reference!r} does not name a class")
    return obj


def _import_module(module_name: str) -> ModuleType:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise TypeSourceError.import_failed(module_name, e) from e


class ModuleTypeSource:
    """Classes defined in a single module, in definition order.

    Classes imported from elsewhere and names starting with an underscore are
    skipped; when the module defines ``__all__`` only listed names are used.
    """

    def __init__(self, module: ModuleType):
        if module is None:
            raise PreconditionError.missing_argument("module")
        self.module = module

    @property
    def name(self) -> str:
        return self.module.__name__

    def exported_types(self) -> Iterator[Type]:
        exported = getattr(self.module, "__all__", None)
        seen = set()
        for name, obj in list(vars(self.module).items()):
            if not inspect.isclass(obj) or obj.__module__ != self.module.__name__:
                continue
            # Aliases bind the same class under another name
            if obj in seen:
                continue
            if exported is not None and name not in exported:
                continue
            if is_concrete_class(obj):
                seen.add(obj)
                yield obj

    def __repr__(self) -> str:
        return f"ModuleTypeSource({self.name})"


class PackageTypeSource:
    """Classes defined in a package and, optionally, all of its submodules."""

    def __init__(self, package: ModuleType, recursive: bool = True):
        if package is None:
            raise PreconditionError.missing_argument("package")
        self.package = package
        self.recursive = recursive

    @property
    def name(self) -> str:
        return self.package.__name__

    def modules(self) -> List[ModuleType]:
        """Import and list the package module followed by its submodules."""
        modules = [self.package]
        path = getattr(self.package, "__path__", None)
        if not self.recursive or path is None:
            return modules

        def on_error(module_name: str) -> None:
            raise TypeSourceError(
                f"Failed to import package {module_name} while walking {self.name}",
                source=module_name,
                error_code="TYPE_SOURCE_IMPORT_FAILED",
            )

        for _, module_name, _ in pkgutil.walk_packages(path, self.package.__name__ + ".", onerror=on_error):
            modules.append(_import_module(module_name))
        return modules

    def exported_types(self) -> Iterator[Type]:
        for module in self.modules():
            yield from ModuleTypeSource(module).exported_types()

    def __repr__(self) -> str:
        return f"PackageTypeSource({self.name}, recursive={self.recursive})"


class TypeListSource:
    """An explicit list of classes, used instead of module discovery."""

    def __init__(self, types: Iterable[Type], name: str = "<types>"):
        if types is None:
            raise PreconditionError.missing_argument("types")
        self.types = list(types)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def exported_types(self) -> Iterator[Type]:
        for cls in self.types:
            if is_concrete_class(cls):
                yield cls

    def __repr__(self) -> str:
        return f"TypeListSource({len(self.types)} types)"


def as_type_source(source: Any, recursive: bool = True) -> TypeSource:
    """Coerce a module, module name, class iterable or TypeSource into a TypeSource.

    Args:
        source: What to scan
        recursive: Whether packages are walked into their submodules

    Raises:
        PreconditionError: If source is None
        TypeSourceError: If the source cannot be imported or is unsupported
    """
    if source is None:
        raise PreconditionError.missing_argument("source")

    if isinstance(source, (ModuleTypeSource, PackageTypeSource, TypeListSource)):
        return source

    if isinstance(source, str):
        source = _import_module(source)

    if isinstance(source, ModuleType):
        if hasattr(source, "__path__"):
            return PackageTypeSource(source, recursive=recursive)
        return ModuleTypeSource(source)

    if inspect.isclass(source):
        return TypeListSource([source], name=source.__name__)

    if isinstance(source, TypeSource):
        return source

    if isinstance(source, Iterable):
        types = list(source)
        if all(inspect.isclass(t) for t in types):
            return TypeListSource(types)

    logger.debug(f"Unsupported type source: {source!r}")
    raise TypeSourceError.unsupported(source)
