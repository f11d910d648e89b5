"""Tests for the record types and builder."""

from datetime import datetime

import pytest

from ctxlog.errors import InvalidSeverityError
from ctxlog.records import (
    ErrorRecord,
    FrameDescriptor,
    Severity,
    UnknownMetadata,
    build_record,
)

NOW = datetime(2026, 1, 2, 3, 4, 5)
FRAME = FrameDescriptor(
    depth=1,
    source_line=12,
    function_name="lookup",
    script_path=None,
    location="<No file>",
    command="",
    arguments="{}",
)


class TestSeverity:
    @pytest.mark.parametrize("value", ["Info", "Warn", "Error", "Start", "End"])
    def test_parse_exact_values(self, value):
        assert Severity.parse(value).value == value

    def test_parse_member(self):
        assert Severity.parse(Severity.END) is Severity.END

    @pytest.mark.parametrize("value", ["error", "INFO", "Warning", "", None])
    def test_parse_is_case_sensitive(self, value):
        with pytest.raises(InvalidSeverityError) as excinfo:
            Severity.parse(value)
        assert excinfo.value.value == value


class TestBuildRecord:
    def test_info_drops_error_sections(self):
        record = build_record(
            severity=Severity.INFO,
            message="hello",
            metadata=UnknownMetadata(invoking_user="svc"),
            calling_function="main",
            now=NOW,
            last_error=ErrorRecord(exception_message="stray"),
            call_stack=[FRAME],
        )

        assert record.last_error is None
        assert record.call_stack is None
        assert record.to_dict() == {
            "timestamp": "2026-01-02 03:04:05",
            "severity": "Info",
            "callingFunction": "main",
            "message": "hello",
            "metadata": {"invokingUser": "svc"},
        }

    def test_error_keeps_sections(self):
        record = build_record(
            severity=Severity.ERROR,
            message="boom",
            metadata=UnknownMetadata(invoking_user="svc"),
            calling_function="main",
            now=NOW,
            timestamp_format="%d/%m/%Y %H:%M",
            last_error=ErrorRecord(exception_message="boom"),
            call_stack=[FRAME],
        )

        doc = record.to_dict()
        assert doc["timestamp"] == "02/01/2026 03:04"
        assert doc["lastError"]["exceptionMessage"] == "boom"
        assert doc["fullCallStackDump"] == [FRAME.to_dict()]

    def test_error_with_empty_stack(self):
        record = build_record(
            severity=Severity.ERROR,
            message="boom",
            metadata=UnknownMetadata(invoking_user="svc"),
            calling_function="",
            now=NOW,
            last_error=ErrorRecord(),
        )
        assert record.to_dict()["fullCallStackDump"] == []
