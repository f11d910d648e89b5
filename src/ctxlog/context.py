"""
Execution context and the context classifier.

The host platform (dashboard runtime, API gateway, job scheduler) describes
the current process through signals. They are gathered once into an
``ExecutionContext`` value, usually with ``ExecutionContext.from_environ()``,
and passed to ``classify_context``, which picks exactly one metadata variant:

    Dashboard > Endpoint > ScheduledJob > Unknown

The first variant whose signals are present wins; later ones are not looked
at.
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Mapping

from loguru import logger

from .records import (
    ContextMetadata,
    DashboardMetadata,
    EndpointMetadata,
    JobParameter,
    ScheduledJobMetadata,
    UnknownMetadata,
)

# =============================================================================
# Signals
# =============================================================================


@dataclass(frozen=True)
class DashboardSignals:
    name: str | None = None
    user: str | None = None
    endpoint_id: str | None = None

    @property
    def present(self) -> bool:
        return bool(self.name)


@dataclass(frozen=True)
class EndpointSignals:
    method: str | None = None
    url: str | None = None
    identity: str | None = None
    body: object = None

    @property
    def present(self) -> bool:
        return bool(self.method) and bool(self.url)


@dataclass(frozen=True)
class JobSignals:
    job_id: object = None
    identity: str | None = None
    script_path: str | None = None
    parameters: tuple[JobParameter, ...] = field(default_factory=tuple)

    @property
    def present(self) -> bool:
        return _valid_job_id(self.job_id)


def _valid_job_id(job_id) -> bool:
    if job_id is None or isinstance(job_id, bool):
        return False
    if isinstance(job_id, int):
        return job_id > 0
    text = str(job_id).strip()
    if not text:
        return False
    if re.fullmatch(r"[-+]?[0-9]+", text):
        return int(text) > 0
    return True


@dataclass(frozen=True)
class ExecutionContext:
    dashboard: DashboardSignals | None = None
    endpoint: EndpointSignals | None = None
    job: JobSignals | None = None
    home_directory: Path | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> 'ExecutionContext':
        """
        Resolve context signals from environment variables.

        Never raises; unparseable job parameters degrade to an empty list.

        Args:
            environ: Environment mapping, os.environ by default

        Returns:
            ExecutionContext
        """
        env = os.environ if environ is None else environ

        dashboard = None
        if env.get("CTXLOG_DASHBOARD_NAME"):
            dashboard = DashboardSignals(
                name=env.get("CTXLOG_DASHBOARD_NAME"),
                user=env.get("CTXLOG_DASHBOARD_USER"),
                endpoint_id=env.get("CTXLOG_DASHBOARD_ENDPOINT_ID"),
            )

        endpoint = None
        if env.get("CTXLOG_ENDPOINT_METHOD") or env.get("CTXLOG_ENDPOINT_URL"):
            endpoint = EndpointSignals(
                method=env.get("CTXLOG_ENDPOINT_METHOD"),
                url=env.get("CTXLOG_ENDPOINT_URL"),
                identity=env.get("CTXLOG_ENDPOINT_IDENTITY"),
                body=env.get("CTXLOG_ENDPOINT_BODY"),
            )

        job = None
        if env.get("CTXLOG_JOB_ID"):
            job = JobSignals(
                job_id=env.get("CTXLOG_JOB_ID"),
                identity=env.get("CTXLOG_JOB_IDENTITY"),
                script_path=env.get("CTXLOG_JOB_SCRIPT_PATH"),
                parameters=parse_job_parameters(env.get("CTXLOG_JOB_PARAMETERS")),
            )

        home = env.get("HOME") or env.get("USERPROFILE")
        if home:
            home_directory = Path(home)
        else:
            try:
                home_directory = Path.home()
            except RuntimeError:
                home_directory = None

        return cls(dashboard=dashboard, endpoint=endpoint, job=job, home_directory=home_directory)


def parse_job_parameters(raw: str | None) -> tuple[JobParameter, ...]:
    """
    Parse a JSON array of ``{name, type, displayValue}`` objects.

    Declaration order is kept. Malformed input is logged and yields ().
    """
    if not raw:
        return ()

    try:
        items = json.loads(raw)
        if not isinstance(items, list):
            raise ValueError("job parameters must be a JSON array")
        return tuple(
            JobParameter(
                name=str(item.get("name", "")),
                type=str(item.get("type", "")),
                display_value=str(item.get("displayValue", item.get("value", ""))),
            )
            for item in items
        )
    except (ValueError, AttributeError, TypeError) as e:
        logger.warning(
            "Ignoring malformed job parameters",
            operation="parse_job_parameters",
            status="skip",
            error=str(e),
            error_type=type(e).__name__
        )
        return ()


# =============================================================================
# Classifier
# =============================================================================


def home_directory_owner(home: PurePath | None) -> str:
    """Last path segment of the home directory, '' if unknown."""
    if home is None:
        return ""
    return PurePath(home).name


def classify_context(context: ExecutionContext) -> ContextMetadata:
    """
    Select the metadata variant for a log record.

    Args:
        context: Resolved execution context

    Returns:
        Exactly one of DashboardMetadata, EndpointMetadata,
        ScheduledJobMetadata, UnknownMetadata
    """
    dashboard = context.dashboard
    if dashboard is not None and dashboard.present:
        return DashboardMetadata(
            invoking_user=dashboard.user,
            name=dashboard.name,
            endpoint_id=dashboard.endpoint_id,
        )

    endpoint = context.endpoint
    if endpoint is not None and endpoint.present:
        return EndpointMetadata(
            invoking_user=endpoint.identity,
            method=endpoint.method,
            endpoint_url=endpoint.url,
            body=endpoint.body,
        )

    job = context.job
    if job is not None and job.present:
        return ScheduledJobMetadata(
            invoking_user=job.identity,
            job_id=job.job_id,
            job_script_path=job.script_path,
            job_parameters=tuple(job.parameters),
        )

    return UnknownMetadata(invoking_user=home_directory_owner(context.home_directory))
