"""Unit tests for observability.diagnostics."""

from __future__ import annotations

import io
import logging
from uuid import uuid4

import pytest

from asset_digest.observability.diagnostics import (
    WARNING_PREFIX,
    DiagnosticsSink,
    LoggerDiagnostics,
    RecordingDiagnostics,
)
from asset_digest.observability.logging import LoggingConfig, setup_logging, shutdown_logging


@pytest.mark.unit
def test_recording_diagnostics_keeps_messages_and_sorted_fields() -> None:
    sink = RecordingDiagnostics()

    sink.warn("first", path="/a.css", kind="missing")
    sink.warn("second")

    assert sink.messages == ("first", "second")
    assert sink.records[0].as_dict() == {
        "message": "first",
        "fields": {"kind": "missing", "path": "/a.css"},
    }


@pytest.mark.unit
def test_recording_diagnostics_forwards() -> None:
    downstream = RecordingDiagnostics()
    sink = RecordingDiagnostics(forward_to=downstream)

    sink.warn("hello", path="/x")

    assert downstream.messages == ("hello",)


@pytest.mark.unit
def test_logger_diagnostics_prefixes_warnings() -> None:
    stream = io.StringIO()
    name = f"asset_digest.tests.diagnostics.{uuid4().hex}"
    setup_logging(LoggingConfig(logger_name=name, stream=stream))
    try:
        LoggerDiagnostics(logging.getLogger(name)).warn("Missing hashed version of file x.")
    finally:
        shutdown_logging()

    assert stream.getvalue() == f"{WARNING_PREFIX}Missing hashed version of file x.\n"


@pytest.mark.unit
def test_sinks_satisfy_protocol() -> None:
    assert isinstance(RecordingDiagnostics(), DiagnosticsSink)
    assert isinstance(LoggerDiagnostics(logging.getLogger("asset_digest")), DiagnosticsSink)
