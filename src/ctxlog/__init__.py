"""
ctxlog - context-aware structured logging.

Writes one compact JSON object per line to an append-only file, tagged with
the kind of host process that logged it (dashboard, endpoint, scheduled job),
and echoes a short block to the console. Error records carry the normalized
exception and the call stack, and the exception is re-raised after writing.
"""

from .config_loader import Settings, load_settings
from .context import (
    DashboardSignals,
    EndpointSignals,
    ExecutionContext,
    JobSignals,
    classify_context,
)
from .errors import (
    CtxlogError,
    InvalidSeverityError,
    LogDirectoryError,
    LogFileError,
    MissingErrorError,
    MissingMessageError,
    PreconditionError,
)
from .logging_config import setup_logger
from .records import JobParameter, LogRecord, Severity
from .writer import ContextLogger, get_default_logger, write_log

__version__ = "0.1.0"

__all__ = [
    "ContextLogger",
    "CtxlogError",
    "DashboardSignals",
    "EndpointSignals",
    "ExecutionContext",
    "InvalidSeverityError",
    "JobParameter",
    "JobSignals",
    "LogDirectoryError",
    "LogFileError",
    "LogRecord",
    "MissingErrorError",
    "MissingMessageError",
    "PreconditionError",
    "Settings",
    "Severity",
    "classify_context",
    "get_default_logger",
    "load_settings",
    "setup_logger",
    "write_log",
]
