"""
Configuration loading for ctxlog.

Settings come from three layers, later layers winning:

1. ``DEFAULT_CONFIG`` (log directory from platformdirs)
2. ``config.toml`` in the user config directory, or the file named by
   ``CTXLOG_CONFIG``
3. Environment variables ``CTXLOG_LOG_DIR`` / ``CTXLOG_LOG_FILE``
"""

import os
import re
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

import platformdirs
from loguru import logger

from .errors import Error, ErrorType, Result

# =============================================================================
# Defaults
# =============================================================================

APP_NAME = "ctxlog"
CONFIG_DIR = Path(platformdirs.user_config_dir(appname=APP_NAME))
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = {
    "log": {
        "directory": platformdirs.user_log_dir(appname=APP_NAME),
        "file_name": "ctxlog.jsonl",
        "timestamp_format": "%Y-%m-%d %H:%M:%S",
    },
    "console": {
        "level": "INFO",
        "colorize": None,  # None: detect terminal
    },
}

Redactor = Callable[[dict], dict]


@dataclass(frozen=True)
class Settings:
    log_directory: Path
    log_file_name: str = "ctxlog.jsonl"
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    console_level: str = "INFO"
    colorize: bool | None = None
    # Applied to each record document before it is written. No redaction by default.
    redactor: Redactor | None = None

    @property
    def log_path(self) -> Path:
        return self.log_directory / self.log_file_name


# =============================================================================
# TOML Loading
# =============================================================================


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Args:
        error: The TOMLDecodeError exception
        file_path: Path to the TOML file

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = None
    line_content = None

    # tomllib reports "(at line 3, column 7)"
    line_match = re.search(r'line\s+(\d+)', error_str, re.IGNORECASE)
    if line_match:
        line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                lines = f.readlines()
                if 0 < line_number <= len(lines):
                    line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config_from_path(config_path: Path) -> Result[dict]:
    """
    Load configuration from a TOML file merged over DEFAULT_CONFIG.

    Args:
        config_path: Path to the TOML file

    Returns:
        Result[dict]: Ok with merged config, or Err with error details
    """
    start_time = time.perf_counter()

    if not config_path.exists():
        logger.debug(
            "Config file not found",
            operation="load_config_from_path",
            status="missing",
            config_path=str(config_path)
        )
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Config file not found: {config_path}",
            context={"config_path": str(config_path)}
        ))

    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_context = extract_toml_error_context(e, config_path)
        logger.warning(
            "Invalid TOML syntax in configuration file",
            operation="load_config_from_path",
            status="failed",
            file=str(config_path),
            line_number=error_context["line_number"],
            error=error_context["formatted_message"]
        )
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=error_context["formatted_message"],
            context={"config_path": str(config_path), "line_number": error_context["line_number"]},
            original_exception=e
        ))
    except PermissionError as e:
        return Result.err(Error(
            error_type=ErrorType.PERMISSION_ERROR,
            message=f"Cannot read config file: {config_path}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    merged = deep_merge(DEFAULT_CONFIG, user_config)
    duration_ms = int((time.perf_counter() - start_time) * 1000)

    logger.debug(
        "Config loaded",
        operation="load_config_from_path",
        status="success",
        config_path=str(config_path),
        metrics={"duration_ms": duration_ms}
    )

    return Result.ok(merged)


# =============================================================================
# Settings
# =============================================================================


def settings_from_config(config: dict, redactor: Redactor | None = None) -> Settings:
    """Build Settings from a merged config dict."""
    log_section = config.get("log", {})
    console_section = config.get("console", {})
    return Settings(
        log_directory=Path(log_section["directory"]).expanduser(),
        log_file_name=log_section["file_name"],
        timestamp_format=log_section["timestamp_format"],
        console_level=str(console_section.get("level", "INFO")).upper(),
        colorize=console_section.get("colorize"),
        redactor=redactor,
    )


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    redactor: Redactor | None = None,
) -> Settings:
    """
    Resolve Settings from defaults, config file, and environment.

    A missing config file is normal and yields defaults. An unreadable or
    invalid one is logged and also falls back to defaults.

    Args:
        config_path: Explicit TOML path (otherwise CTXLOG_CONFIG or CONFIG_PATH)
        environ: Environment mapping, os.environ by default
        redactor: Optional hook applied to every record document

    Returns:
        Settings
    """
    env = os.environ if environ is None else environ

    if config_path is None:
        config_path = Path(env["CTXLOG_CONFIG"]).expanduser() if env.get("CTXLOG_CONFIG") else CONFIG_PATH

    result = load_config_from_path(config_path)
    if result.is_err() and result.error.error_type is not ErrorType.FILE_NOT_FOUND:
        logger.warning(
            "Using default configuration",
            operation="load_settings",
            status="fallback",
            reason=result.error.error_type.value,
            config_path=str(config_path)
        )
    config = result.value if result.is_ok() else DEFAULT_CONFIG

    overrides = {}
    if env.get("CTXLOG_LOG_DIR"):
        overrides["directory"] = env["CTXLOG_LOG_DIR"]
    if env.get("CTXLOG_LOG_FILE"):
        overrides["file_name"] = env["CTXLOG_LOG_FILE"]
    if overrides:
        config = deep_merge(config, {"log": overrides})

    return settings_from_config(config, redactor=redactor)
