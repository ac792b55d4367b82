from abc import ABC, abstractmethod
from typing import Protocol

from service_scan import Lifetime, service

from .exported import PublicService  # noqa: F401


class Greeter(Protocol):
    def greet(self) -> str:
        ...


class AbstractGreeter(ABC):
    @abstractmethod
    def greet(self) -> str:
        ...


@service
class EnglishGreeter(AbstractGreeter):
    def greet(self) -> str:
        return "hello"


class PlainHelper:
    pass


@service
class _PrivateGreeter(AbstractGreeter):
    def greet(self) -> str:
        return "psst"


@service(lifetime=Lifetime.TRANSIENT)
class FrenchGreeter(Greeter):
    def greet(self) -> str:
        return "bonjour"
