"""
Logging entry points.

``write_log`` and the ``ContextLogger`` methods all run the same pipeline:

1. Check preconditions (message, severity, error argument); nothing is
   written when they fail
2. Classify the execution context
3. Sample the calling function
4. Error only: normalize the error and capture the call chain
5. Build the record and hand it to the sink
6. Error only: re-raise the caller's exception

Whichever public function the caller invoked is depth 0 of the call chain,
so the caller itself is always depth 1.
"""

import inspect
from datetime import datetime
from pathlib import Path
from types import FrameType
from typing import Callable, NoReturn

from loguru import logger

from .callchain import calling_function, capture_call_chain
from .config_loader import Settings, load_settings
from .context import ExecutionContext, classify_context
from .errors import MissingErrorError, MissingMessageError
from .normalize import normalize_error
from .records import LogRecord, Severity, build_record
from .sink import JsonlSink


def check_preconditions(message, severity, last_error) -> Severity:
    """
    Validate a log call before it has any effect.

    Raises:
        MissingMessageError: message missing, empty, or not a string
        InvalidSeverityError: severity not Info/Warn/Error/Start/End
        MissingErrorError: Error severity without an exception
    """
    if not isinstance(message, str) or not message:
        raise MissingMessageError("A non-empty message is required")

    parsed = Severity.parse(severity)

    if parsed is Severity.ERROR:
        if last_error is None:
            raise MissingErrorError("Error severity requires the exception being reported")
        if not isinstance(last_error, BaseException):
            raise MissingErrorError(
                f"Error severity requires an exception, got {type(last_error).__name__}"
            )
    return parsed


class ContextLogger:
    """
    Context-aware JSONL logger.

    Settings and execution context are resolved once, when the logger is
    created, and reused for every call.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        context: ExecutionContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings if settings is not None else load_settings()
        self.context = context if context is not None else ExecutionContext.from_environ()
        self.clock = clock or datetime.now

    def sink_for(self, log_directory: Path | str | None = None) -> JsonlSink:
        directory = Path(log_directory).expanduser() if log_directory is not None else self.settings.log_directory
        return JsonlSink(directory, self.settings.log_file_name, self.settings.redactor)

    def log(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        last_error: BaseException | None = None,
        log_directory: Path | str | None = None,
        context: ExecutionContext | None = None,
    ) -> LogRecord:
        """
        Write one record.

        Args:
            message: Required, non-empty
            severity: Info, Warn, Error, Start or End
            last_error: The exception being reported; required for Error,
                ignored otherwise
            log_directory: Overrides the configured directory for this call
            context: Overrides the logger's execution context for this call

        Returns:
            The persisted LogRecord (never returns for Error)

        Raises:
            PreconditionError: invalid arguments, nothing written
            LogDirectoryError: the log directory is unusable, nothing written
            LogFileError: the log file cannot be opened or written
            BaseException: ``last_error`` itself, after it was written
        """
        frame = inspect.currentframe()
        try:
            return self._write(frame, message, severity, last_error, log_directory, context)
        finally:
            del frame

    def info(self, message: str, **kwargs) -> LogRecord:
        frame = inspect.currentframe()
        try:
            return self._write(frame, message, Severity.INFO, **kwargs)
        finally:
            del frame

    def warn(self, message: str, **kwargs) -> LogRecord:
        frame = inspect.currentframe()
        try:
            return self._write(frame, message, Severity.WARN, **kwargs)
        finally:
            del frame

    def start(self, message: str, **kwargs) -> LogRecord:
        frame = inspect.currentframe()
        try:
            return self._write(frame, message, Severity.START, **kwargs)
        finally:
            del frame

    def end(self, message: str, **kwargs) -> LogRecord:
        frame = inspect.currentframe()
        try:
            return self._write(frame, message, Severity.END, **kwargs)
        finally:
            del frame

    def error(self, message: str, error: BaseException, **kwargs) -> NoReturn:
        frame = inspect.currentframe()
        try:
            self._write(frame, message, Severity.ERROR, last_error=error, **kwargs)
        finally:
            del frame

    def _write(
        self,
        origin: FrameType,
        message,
        severity,
        last_error=None,
        log_directory=None,
        context=None,
    ) -> LogRecord:
        parsed = check_preconditions(message, severity, last_error)
        is_error = parsed is Severity.ERROR

        if last_error is not None and not is_error:
            logger.debug(
                "Ignoring error argument for non-error severity",
                operation="write_log",
                severity=parsed.value
            )

        metadata = classify_context(context if context is not None else self.context)
        caller = calling_function(origin)

        error_record = None
        call_stack = None
        if is_error:
            error_record = normalize_error(last_error)
            call_stack = capture_call_chain(origin)

        record = build_record(
            severity=parsed,
            message=message,
            metadata=metadata,
            calling_function=caller,
            now=self.clock(),
            timestamp_format=self.settings.timestamp_format,
            last_error=error_record,
            call_stack=call_stack,
        )

        self.sink_for(log_directory).emit(record)

        if is_error:
            raise last_error
        return record


# =============================================================================
# Module-level entry point
# =============================================================================

_default_logger: ContextLogger | None = None


def get_default_logger() -> ContextLogger:
    """
    Process-wide logger built from load_settings() and the environment.

    Loguru handlers are left as the host application configured them.
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = ContextLogger(settings=load_settings(), context=ExecutionContext.from_environ())
    return _default_logger


def write_log(
    message: str,
    severity: Severity | str = Severity.INFO,
    *,
    last_error: BaseException | None = None,
    log_directory: Path | str | None = None,
    context: ExecutionContext | None = None,
    settings: Settings | None = None,
) -> LogRecord:
    """
    Write one structured log record.

    See ``ContextLogger.log``. Without ``settings`` the process-wide default
    logger is used.
    """
    # Validated here too so a bad call never builds the default logger
    check_preconditions(message, severity, last_error)

    frame = inspect.currentframe()
    try:
        target = ContextLogger(settings=settings, context=context) if settings is not None else get_default_logger()
        return target._write(frame, message, severity, last_error, log_directory, context)
    finally:
        del frame
