"""
Error normalization.

A reported error arrives in one of two shapes:

- wrapped: an exception exposing the real failure on ``error_record``
  (host runtimes wrap script errors this way)
- direct: the exception itself

``classify_error`` tells them apart once; ``normalize_error`` unwraps and
extracts an ``ErrorRecord``. Each field is extracted on its own, so a field
that is missing on this shape ends up as None instead of failing the log
call.
"""

import sys
import traceback
from dataclasses import dataclass
from types import FrameType, TracebackType
from typing import Callable

from .records import ErrorRecord

# =============================================================================
# Error Shapes
# =============================================================================


@dataclass(frozen=True)
class WrappedError:
    carrier: BaseException
    inner: BaseException


@dataclass(frozen=True)
class DirectError:
    error: BaseException


RaisedError = WrappedError | DirectError


def exposes_error_record(value) -> bool:
    """True when ``value`` carries an inner exception on ``error_record``."""
    try:
        inner = getattr(value, "error_record", None)
    except Exception:
        return False
    return isinstance(inner, BaseException)


def classify_error(value: BaseException) -> RaisedError:
    if exposes_error_record(value):
        return WrappedError(carrier=value, inner=value.error_record)
    return DirectError(error=value)


def resolve_error(value: BaseException) -> BaseException:
    """The exception fields are read from."""
    shape = classify_error(value)
    if isinstance(shape, WrappedError):
        return shape.inner
    return shape.error


# =============================================================================
# Field Extraction
# =============================================================================


def _safe(extract: Callable[[], object]):
    try:
        return extract()
    except Exception:
        return None


def _innermost_traceback(exc: BaseException) -> TracebackType | None:
    tb = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb


def _raising_frame(exc: BaseException) -> FrameType | None:
    tb = _innermost_traceback(exc)
    return tb.tb_frame if tb is not None else None


def _exception_source(exc: BaseException) -> str | None:
    frame = _raising_frame(exc)
    if frame is not None:
        module = frame.f_globals.get("__name__")
        if module:
            return module
    return type(exc).__module__


def _stack_trace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip("\n")


def _position_message(exc: BaseException) -> str | None:
    tb = _innermost_traceback(exc)
    if tb is None:
        return None
    summary = traceback.extract_tb(tb, limit=1)
    return "".join(traceback.format_list(summary)).rstrip("\n")


def _invocation_name(exc: BaseException) -> str | None:
    frame = _raising_frame(exc)
    return frame.f_code.co_name if frame is not None else None


def _script_name(exc: BaseException) -> str | None:
    frame = _raising_frame(exc)
    if frame is None:
        return None
    filename = frame.f_code.co_filename
    if filename.startswith("<") and filename.endswith(">"):
        return None
    return filename


def _command_version(exc: BaseException) -> str | None:
    """``__version__`` of the raising module or its top-level package."""
    frame = _raising_frame(exc)
    if frame is None:
        return None

    version = frame.f_globals.get("__version__")
    if version is None:
        module_name = frame.f_globals.get("__name__") or ""
        package = sys.modules.get(module_name.partition(".")[0])
        version = getattr(package, "__version__", None)

    return version if isinstance(version, str) else None


def normalize_error(value: BaseException) -> ErrorRecord:
    """
    Build an ErrorRecord from a wrapped or direct exception.

    Never raises.

    Args:
        value: The exception passed to the logger

    Returns:
        ErrorRecord; wrapped and direct forms of the same exception compare equal
    """
    exc = _safe(lambda: resolve_error(value))
    if exc is None:
        return ErrorRecord()

    return ErrorRecord(
        exception_message=_safe(lambda: str(exc)),
        exception_source=_safe(lambda: _exception_source(exc)),
        exception_stack_trace=_safe(lambda: _stack_trace(exc)),
        position_message=_safe(lambda: _position_message(exc)),
        invocation_name=_safe(lambda: _invocation_name(exc)),
        script_name=_safe(lambda: _script_name(exc)),
        command_version=_safe(lambda: _command_version(exc)),
    )
