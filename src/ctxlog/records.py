"""
Log record types and the record builder.

Every type renders itself with ``to_dict()`` using the camelCase keys of the
persisted JSON line. Optional sections are left out of the document rather
than written as null.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .errors import InvalidSeverityError


class Severity(str, Enum):
    INFO = "Info"
    WARN = "Warn"
    ERROR = "Error"
    START = "Start"
    END = "End"

    @classmethod
    def parse(cls, value) -> 'Severity':
        """Accept a member or its exact (case-sensitive) value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value:
                    return member
        raise InvalidSeverityError(value)


# =============================================================================
# Context Metadata Variants
# =============================================================================


@dataclass(frozen=True)
class JobParameter:
    name: str
    type: str
    display_value: str

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "displayValue": self.display_value}


@dataclass(frozen=True)
class DashboardMetadata:
    invoking_user: str | None
    name: str
    endpoint_id: str | None

    def to_dict(self) -> dict:
        return {
            "invokingUser": self.invoking_user,
            "name": self.name,
            "endpointId": self.endpoint_id,
        }


@dataclass(frozen=True)
class EndpointMetadata:
    invoking_user: str | None
    method: str
    endpoint_url: str
    body: object = None

    def to_dict(self) -> dict:
        return {
            "invokingUser": self.invoking_user,
            "method": self.method,
            "endpointUrl": self.endpoint_url,
            "body": self.body,
        }


@dataclass(frozen=True)
class ScheduledJobMetadata:
    invoking_user: str | None
    job_id: object
    job_script_path: str | None
    job_parameters: tuple[JobParameter, ...] = ()

    def to_dict(self) -> dict:
        return {
            "invokingUser": self.invoking_user,
            "jobId": self.job_id,
            "jobScriptPath": self.job_script_path,
            "jobParameters": [p.to_dict() for p in self.job_parameters],
        }


@dataclass(frozen=True)
class UnknownMetadata:
    invoking_user: str

    def to_dict(self) -> dict:
        return {"invokingUser": self.invoking_user}


ContextMetadata = DashboardMetadata | EndpointMetadata | ScheduledJobMetadata | UnknownMetadata


# =============================================================================
# Error Detail
# =============================================================================


@dataclass(frozen=True)
class ErrorRecord:
    exception_message: str | None = None
    exception_source: str | None = None
    exception_stack_trace: str | None = None
    position_message: str | None = None
    invocation_name: str | None = None
    script_name: str | None = None
    command_version: str | None = None

    def to_dict(self) -> dict:
        data = {
            "exceptionMessage": self.exception_message,
            "exceptionSource": self.exception_source,
            "exceptionStackTrace": self.exception_stack_trace,
            "positionMessage": self.position_message,
            "invocationName": self.invocation_name,
        }
        # Only present when resolvable
        if self.command_version is not None:
            data["commandVersion"] = self.command_version
        data["scriptName"] = self.script_name
        return data


@dataclass(frozen=True)
class FrameDescriptor:
    depth: int
    source_line: int
    function_name: str
    script_path: str | None
    location: str
    command: str
    arguments: str

    def to_dict(self) -> dict:
        return {
            "depth": self.depth,
            "sourceLine": self.source_line,
            "functionName": self.function_name,
            "scriptPath": self.script_path,
            "location": self.location,
            "command": self.command,
            "arguments": self.arguments,
        }


# =============================================================================
# Log Record
# =============================================================================


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    severity: Severity
    calling_function: str
    message: str
    metadata: ContextMetadata
    last_error: ErrorRecord | None = None
    call_stack: tuple[FrameDescriptor, ...] | None = field(default=None)

    def to_dict(self) -> dict:
        data = {
            "timestamp": self.timestamp,
            "severity": self.severity.value,
            "callingFunction": self.calling_function,
            "message": self.message,
            "metadata": self.metadata.to_dict(),
        }
        if self.last_error is not None:
            data["lastError"] = self.last_error.to_dict()
        if self.call_stack is not None:
            data["fullCallStackDump"] = [frame.to_dict() for frame in self.call_stack]
        return data


def build_record(
    severity: Severity,
    message: str,
    metadata: ContextMetadata,
    calling_function: str,
    now: datetime,
    timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    last_error: ErrorRecord | None = None,
    call_stack: list[FrameDescriptor] | None = None,
) -> LogRecord:
    """
    Assemble a LogRecord.

    Error detail and the call stack are attached only for Error severity;
    for any other severity they are dropped even if supplied.
    """
    is_error = severity is Severity.ERROR
    return LogRecord(
        timestamp=now.strftime(timestamp_format),
        severity=severity,
        calling_function=calling_function,
        message=message,
        metadata=metadata,
        last_error=last_error if is_error else None,
        call_stack=tuple(call_stack or ()) if is_error else None,
    )
