import json
from datetime import datetime
from pathlib import Path

import pytest
from loguru import logger

from ctxlog.config_loader import Settings
from ctxlog.context import ExecutionContext
from ctxlog.writer import ContextLogger

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53)


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs" / "nested"


@pytest.fixture
def settings(log_dir):
    return Settings(log_directory=log_dir)


@pytest.fixture
def bare_context():
    """No host signals; invoking user falls back to the home directory."""
    return ExecutionContext(home_directory=Path("/home/svc-runner"))


@pytest.fixture
def writer(settings, bare_context):
    return ContextLogger(settings=settings, context=bare_context, clock=lambda: FIXED_NOW)


@pytest.fixture
def read_records():
    def _read(path):
        return [json.loads(line) for line in Path(path).read_text(encoding="utf-8").splitlines()]
    return _read


@pytest.fixture
def echoes():
    """loguru records emitted as console echoes."""
    captured = []
    handler_id = logger.add(
        lambda message: captured.append(message.record),
        level="DEBUG",
        format="{message}",
        filter=lambda record: record["extra"].get("ctxlog_echo", False),
    )
    yield captured
    logger.remove(handler_id)
