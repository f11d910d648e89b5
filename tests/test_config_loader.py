"""Tests for configuration loading."""

from pathlib import Path

from ctxlog.config_loader import (
    DEFAULT_CONFIG,
    deep_merge,
    load_config_from_path,
    load_settings,
)
from ctxlog.errors import ErrorType


def write_toml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfigFromPath:
    def test_missing_file(self, tmp_path):
        result = load_config_from_path(tmp_path / "absent.toml")

        assert result.is_err()
        assert result.error.error_type is ErrorType.FILE_NOT_FOUND

    def test_merges_over_defaults(self, tmp_path):
        path = write_toml(tmp_path / "config.toml", '[log]\nfile_name = "jobs.jsonl"\n')

        result = load_config_from_path(path)

        assert result.is_ok()
        assert result.value["log"]["file_name"] == "jobs.jsonl"
        assert result.value["log"]["timestamp_format"] == DEFAULT_CONFIG["log"]["timestamp_format"]
        assert result.value["console"] == DEFAULT_CONFIG["console"]

    def test_invalid_toml_reports_line(self, tmp_path):
        path = write_toml(tmp_path / "config.toml", '[log]\nfile_name = "ok"\ndirectory = \n')

        result = load_config_from_path(path)

        assert result.is_err()
        assert result.error.error_type is ErrorType.PARSE_ERROR
        assert result.error.context["line_number"] == 3
        assert result.error.original_exception is not None


class TestLoadSettings:
    def test_defaults_when_file_missing(self, tmp_path):
        settings = load_settings(config_path=tmp_path / "absent.toml", environ={})

        assert settings.log_directory == Path(DEFAULT_CONFIG["log"]["directory"])
        assert settings.log_file_name == "ctxlog.jsonl"
        assert settings.console_level == "INFO"
        assert settings.colorize is None
        assert settings.redactor is None

    def test_file_values(self, tmp_path):
        path = write_toml(
            tmp_path / "config.toml",
            f'[log]\ndirectory = "{(tmp_path / "out").as_posix()}"\ntimestamp_format = "%H:%M"\n'
            '[console]\nlevel = "warning"\ncolorize = false\n',
        )

        settings = load_settings(config_path=path, environ={})

        assert settings.log_directory == tmp_path / "out"
        assert settings.timestamp_format == "%H:%M"
        assert settings.console_level == "WARNING"
        assert settings.colorize is False
        assert settings.log_path == tmp_path / "out" / "ctxlog.jsonl"

    def test_config_path_from_environment(self, tmp_path):
        path = write_toml(tmp_path / "alt.toml", '[log]\nfile_name = "alt.jsonl"\n')

        settings = load_settings(environ={"CTXLOG_CONFIG": str(path)})

        assert settings.log_file_name == "alt.jsonl"

    def test_environment_overrides_file(self, tmp_path):
        path = write_toml(tmp_path / "config.toml", '[log]\ndirectory = "/from/file"\n')
        env = {"CTXLOG_LOG_DIR": str(tmp_path / "env"), "CTXLOG_LOG_FILE": "env.jsonl"}

        settings = load_settings(config_path=path, environ=env)

        assert settings.log_directory == tmp_path / "env"
        assert settings.log_file_name == "env.jsonl"

    def test_invalid_file_falls_back(self, tmp_path):
        path = write_toml(tmp_path / "config.toml", "[log\n")

        settings = load_settings(config_path=path, environ={})

        assert settings.log_file_name == DEFAULT_CONFIG["log"]["file_name"]

    def test_redactor_passed_through(self, tmp_path):
        def redactor(document):
            return document

        settings = load_settings(config_path=tmp_path / "absent.toml", environ={}, redactor=redactor)

        assert settings.redactor is redactor


def test_deep_merge_nested():
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    merged = deep_merge(base, {"a": {"y": 3}, "c": 4})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}
