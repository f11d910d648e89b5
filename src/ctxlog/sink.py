"""
JSONL sink: one compact JSON object per line, appended to a file, plus a
console echo through loguru.

Each ``emit`` is a full open-append-close cycle. There is no buffering,
rotation, or cross-process locking.
"""

import json
from pathlib import Path

from loguru import logger

from .config_loader import Redactor
from .errors import LogDirectoryError, LogFileError
from .logging_config import SEVERITY_LEVELS
from .records import LogRecord


class JsonlSink:
    """Append-only JSON lines writer for LogRecords."""

    def __init__(self, directory: Path, file_name: str = "ctxlog.jsonl", redactor: Redactor | None = None):
        self.directory = Path(directory)
        self.file_name = file_name
        self.redactor = redactor

    @property
    def path(self) -> Path:
        return self.directory / self.file_name

    def ensure_directory(self) -> None:
        """
        Create the log directory (and parents) if needed.

        A directory that already exists, including one created concurrently
        by another writer, is success.

        Raises:
            LogDirectoryError: path cannot be created or is not a directory
        """
        if self.directory.is_dir():
            return

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LogDirectoryError(self.directory, e) from e

        logger.debug(
            "Created log directory",
            operation="ensure_directory",
            status="created",
            path=str(self.directory)
        )

    def serialize(self, record: LogRecord) -> str:
        document = record.to_dict()
        if self.redactor is not None:
            document = self.redactor(document)
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False, default=str)

    def append(self, line: str) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise LogFileError(self.path, e) from e

    def echo(self, record: LogRecord) -> None:
        """Print the two-line console block for a record."""
        text = format_console_line(record)
        logger.bind(ctxlog_echo=True).log(SEVERITY_LEVELS[record.severity.value], text)

    def emit(self, record: LogRecord) -> None:
        """Persist then display one record."""
        self.ensure_directory()
        self.append(self.serialize(record))
        self.echo(record)


def format_console_line(record: LogRecord) -> str:
    return (
        f"{record.timestamp} Sev={record.severity.value} CallingFunction={record.calling_function}\n"
        f"   {record.message}"
    )
