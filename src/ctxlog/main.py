"""
Command line entry point.

    ctxlog "Running lookup on [FakeService]"
    ctxlog -s Start "Nightly sync"
    ctxlog -s Error -d /var/log/jobs "lookup failed"

The execution context comes from the CTXLOG_* environment variables. An
Error record is written and then reported through the exit status.
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from .config_loader import load_settings
from .context import ExecutionContext
from .errors import CtxlogError, ReportedError
from .logging_config import setup_logger
from .records import Severity
from .writer import ContextLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ctxlog", description="Write a context-aware JSONL log record")
    parser.add_argument("message", help="log message")
    parser.add_argument(
        "-s", "--severity",
        default=Severity.INFO.value,
        choices=[s.value for s in Severity],
        help="record severity (default: Info)",
    )
    parser.add_argument("-d", "--log-directory", default=None, help="override the log directory")
    parser.add_argument("-c", "--config", default=None, help="path to a config.toml")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings(config_path=Path(args.config) if args.config else None)
    setup_logger(level=settings.console_level, colorize=settings.colorize)
    writer = ContextLogger(settings=settings, context=ExecutionContext.from_environ())

    last_error = ReportedError(args.message) if args.severity == Severity.ERROR.value else None

    try:
        writer.log(
            args.message,
            severity=args.severity,
            last_error=last_error,
            log_directory=args.log_directory,
        )
    except ReportedError as e:
        return e.exit_code
    except CtxlogError as e:
        logger.error(
            "Log record not written",
            operation="main",
            status="failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return e.exit_code

    return 0


if __name__ == "__main__":
    sys.exit(main())
