"""
Error types for ctxlog.

Two families live here:

- Exceptions raised by the logger itself. Each carries an ``exit_code`` so the
  command line can map failures to process status.
- ``Result``/``Error`` values used where a failure is reported rather than
  raised (configuration loading).
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

T = TypeVar('T')


# =============================================================================
# Logger Exceptions
# =============================================================================


class CtxlogError(Exception):
    """Base exception for failures of the logger itself."""
    exit_code = 1


class PreconditionError(CtxlogError, ValueError):
    """Invalid call; raised before any side effect."""
    exit_code = 2


class MissingMessageError(PreconditionError):
    """The message argument was omitted or empty."""


class InvalidSeverityError(PreconditionError):
    """Severity is not one of Info, Warn, Error, Start, End."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid severity {value!r}; expected one of Info, Warn, Error, Start, End"
        )


class MissingErrorError(PreconditionError):
    """Error severity requires the exception being reported."""


class LogDirectoryError(CtxlogError):
    """The log directory could not be created or is not a directory."""
    exit_code = 3

    def __init__(self, path: Path, cause: BaseException | None = None):
        self.path = Path(path)
        self.cause = cause
        message = f"Cannot use log directory {self.path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class LogFileError(CtxlogError):
    """The log file could not be opened or written."""
    exit_code = 3

    def __init__(self, path: Path, cause: BaseException | None = None):
        self.path = Path(path)
        self.cause = cause
        message = f"Cannot write log file {self.path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ReportedError(CtxlogError):
    """Error reported from the command line with ``--severity Error``."""


# =============================================================================
# Error Handling Types (Result + Error)
# =============================================================================


class ErrorType(Enum):
    FILE_NOT_FOUND = "file_not_found"
    PARSE_ERROR = "parse_error"
    PERMISSION_ERROR = "permission_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception = None


@dataclass
class Result(Generic[T]):
    success: bool
    value: T = None
    error: Error = None

    @staticmethod
    def ok(value: T) -> 'Result[T]':
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> 'Result[T]':
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success
