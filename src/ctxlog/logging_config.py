"""
Console logging setup (loguru).

Everything ctxlog prints goes through loguru: the per-record console echo
emitted by the sink and the library's own diagnostics. ``setup_logger``
installs a single stderr sink whose format depends on the record:

- echo records (bound with ``ctxlog_echo=True``) print their message as-is,
  colored by level, so an Error block stands out in red
- everything else prints ``time | level | message``
"""

import sys

from loguru import logger

# =============================================================================
# Custom Levels
# =============================================================================

# Start/End mark the phases of a job run; they sit just above INFO.
CUSTOM_LEVELS = {
    "START": (21, "<cyan><bold>"),
    "END": (22, "<magenta><bold>"),
}

# Severity value -> loguru level name
SEVERITY_LEVELS = {
    "Info": "INFO",
    "Warn": "WARNING",
    "Error": "ERROR",
    "Start": "START",
    "End": "END",
}


def register_levels() -> None:
    """Register START/END with loguru. Safe to call more than once."""
    for name, (no, color) in CUSTOM_LEVELS.items():
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no, color=color)


register_levels()


# =============================================================================
# Console Sink
# =============================================================================


def console_format(record) -> str:
    """Pick the format string for a loguru record."""
    if record["extra"].get("ctxlog_echo"):
        return "<level>{message}</level>\n"
    return "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}\n{exception}"


def console_sink(message):
    """Write to stderr. Resolved per call so redirected streams are honored."""
    sys.stderr.write(str(message))


def setup_logger(level: str = "INFO", colorize: bool | None = None):
    """
    Configure loguru for ctxlog console output.

    Removes existing handlers and adds ``console_sink``.

    Args:
        level: Minimum level printed to the console
        colorize: Force ANSI colors on/off; None detects a terminal on stderr

    Returns:
        The loguru logger
    """
    logger.remove()

    if colorize is None:
        colorize = bool(getattr(sys.stderr, "isatty", lambda: False)())

    logger.add(
        console_sink,
        level=level,
        format=console_format,
        colorize=colorize,
    )

    return logger
