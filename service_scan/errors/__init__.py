"""Error handling framework for service-scan.

This module provides:
- Rich error types with context and suggestions
- One error type per failure class of the registration process
- Integration with loguru logging
"""

from .base import ErrorContext, ServiceScanError
from .types import (
    ConfigurationError,
    ConfiguratorError,
    DeclarationError,
    PreconditionError,
    ResolutionError,
    TypeSourceError,
)

__all__ = [
    "ServiceScanError",
    "ErrorContext",
    "ConfigurationError",
    "ConfiguratorError",
    "DeclarationError",
    "PreconditionError",
    "ResolutionError",
    "TypeSourceError",
]
