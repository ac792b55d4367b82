"""Base error classes with rich context for service-scan."""

from __future__ import annotations

import inspect
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, Field


def _frame_location(frame, line_number: int) -> Dict[str, Any]:
    return {
        "module": frame.f_globals.get("__name__"),
        "function": frame.f_code.co_name,
        "line_number": line_number,
        "file_path": frame.f_code.co_filename,
    }


class ErrorContext(BaseModel):
    """Rich context information for errors."""

    timestamp: datetime = Field(default_factory=datetime.now)
    module: Optional[str] = None
    function: Optional[str] = None
    line_number: Optional[int] = None
    file_path: Optional[str] = None
    user_message: Optional[str] = None
    technical_details: Dict[str, Any] = Field(default_factory=dict)
    stack_trace: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    related_errors: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorContext":
        """Create context from a raised exception's innermost frame."""
        tb = exc.__traceback__
        if tb is None:
            return cls()
        while tb.tb_next is not None:
            tb = tb.tb_next
        return cls(
            **_frame_location(tb.tb_frame, tb.tb_lineno),
            stack_trace=traceback.format_tb(exc.__traceback__),
        )

    @classmethod
    def from_caller(cls) -> "ErrorContext":
        """Create context from the first frame outside this package.

        Errors are created before they are raised, so the location is taken
        from the code that builds them rather than from a traceback.
        """
        frame = inspect.currentframe()
        try:
            while frame is not None and frame.f_globals.get("__name__", "").startswith(__package__):
                frame = frame.f_back
            if frame is None:
                return cls()
            return cls(**_frame_location(frame, frame.f_lineno))
        finally:
            del frame

    def add_suggestion(self, suggestion: str) -> None:
        """Add a helpful suggestion for resolving the error."""
        self.suggestions.append(suggestion)

    def add_technical_detail(self, key: str, value: Any) -> None:
        """Add technical debugging information."""
        self.technical_details[key] = value

    def add_related_error(self, error: BaseException) -> None:
        """Add a related error for context."""
        self.related_errors.append({
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exception_only(type(error), error),
        })


T = TypeVar("T", bound="ServiceScanError")


class ServiceScanError(Exception):
    """Base exception class for service-scan with rich context support."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        error_code: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize the error with context.

        Args:
            message: Human-readable error message
            context: Rich error context
            cause: Original exception that caused this error
            error_code: Unique error code for programmatic handling
            recoverable: Whether this error can be recovered from
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext.from_caller()
        self.cause = cause
        self.error_code = error_code or self._generate_error_code()
        self.recoverable = recoverable

        self.context.user_message = message
        if cause:
            self.context.add_related_error(cause)

        self._log_error()

    def _generate_error_code(self) -> str:
        """Generate an error code based on the error type."""
        class_name = self.__class__.__name__
        # CamelCase to UPPER_SNAKE_CASE
        code = ""
        for i, char in enumerate(class_name):
            if i > 0 and char.isupper() and class_name[i - 1].islower():
                code += "_"
            code += char.upper()
        return code.replace("_ERROR", "")

    def _log_error(self) -> None:
        """Log the error with appropriate severity."""
        log_data = {
            "error_code": self.error_code,
            "recoverable": self.recoverable,
            "module": self.context.module,
            "function": self.context.function,
            "line": self.context.line_number,
        }

        if self.context.technical_details:
            log_data["details"] = self.context.technical_details

        bound = logger.bind(**log_data)
        if self.recoverable:
            bound.warning(self.message)
        else:
            bound.error(self.message)

    @classmethod
    def from_exception(
        cls: Type[T],
        exc: BaseException,
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> T:
        """Create error from another exception."""
        error_message = message or str(exc)
        context = ErrorContext.from_exception(exc)
        return cls(error_message, context=context, cause=exc, **kwargs)

    def with_context(self: T, **kwargs: Any) -> T:
        """Add context information to the error."""
        for key, value in kwargs.items():
            self.context.add_technical_detail(key, value)
        return self

    def with_suggestion(self: T, suggestion: str) -> T:
        """Add a suggestion for resolving the error."""
        self.context.add_suggestion(suggestion)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context.model_dump(mode="json"),
            "cause": str(self.cause) if self.cause else None,
        }
