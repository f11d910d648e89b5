"""Tests for the command line entry point."""

import json

import pytest
from loguru import logger

from ctxlog.main import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in [
        "CTXLOG_DASHBOARD_NAME",
        "CTXLOG_ENDPOINT_METHOD",
        "CTXLOG_ENDPOINT_URL",
        "CTXLOG_JOB_ID",
        "CTXLOG_LOG_DIR",
        "CTXLOG_LOG_FILE",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CTXLOG_CONFIG", str(tmp_path / "no-config.toml"))
    monkeypatch.setenv("HOME", str(tmp_path / "home" / "operator"))
    yield
    logger.remove()


def read_records(directory):
    return [json.loads(line) for line in (directory / "ctxlog.jsonl").read_text(encoding="utf-8").splitlines()]


class TestMain:
    def test_info(self, tmp_path, capsys):
        out_dir = tmp_path / "out"

        assert main(["-d", str(out_dir), "Running lookup on [FakeService]"]) == 0

        [doc] = read_records(out_dir)
        assert doc["severity"] == "Info"
        assert doc["metadata"] == {"invokingUser": "operator"}
        assert "Sev=Info" in capsys.readouterr().err

    def test_job_context_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CTXLOG_JOB_ID", "12")
        monkeypatch.setenv("CTXLOG_JOB_IDENTITY", "scheduler")
        out_dir = tmp_path / "out"

        assert main(["-s", "Start", "-d", str(out_dir), "Nightly sync"]) == 0

        [doc] = read_records(out_dir)
        assert doc["severity"] == "Start"
        assert doc["metadata"]["jobId"] == "12"
        assert doc["metadata"]["invokingUser"] == "scheduler"

    def test_error_exit_status(self, tmp_path):
        out_dir = tmp_path / "out"

        assert main(["-s", "Error", "-d", str(out_dir), "lookup failed"]) == 1

        [doc] = read_records(out_dir)
        assert doc["lastError"]["exceptionMessage"] == "lookup failed"
        assert doc["fullCallStackDump"][0]["functionName"] == "main"

    def test_directory_failure(self, tmp_path, capsys):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        assert main(["-d", str(blocker), "hello"]) == 3
        assert "Log record not written" in capsys.readouterr().err

    def test_file_failure(self, tmp_path, capsys):
        out_dir = tmp_path / "out"
        (out_dir / "ctxlog.jsonl").mkdir(parents=True)

        assert main(["-s", "Error", "-d", str(out_dir), "lookup failed"]) == 3
        assert "Log record not written" in capsys.readouterr().err

    def test_invalid_severity_rejected(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["-s", "Verbose", "hello"])
        assert excinfo.value.code == 2

    def test_log_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CTXLOG_LOG_DIR", str(tmp_path / "env-dir"))

        assert main(["hello"]) == 0

        [doc] = read_records(tmp_path / "env-dir")
        assert doc["message"] == "hello"
