"""Public observability primitives: logging setup and diagnostics sinks."""

from asset_digest.observability.diagnostics import (
    Diagnostic,
    DiagnosticsSink,
    LoggerDiagnostics,
    RecordingDiagnostics,
)
from asset_digest.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    get_active_logging_handle,
    get_logger,
    logging_config_from_settings,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "Diagnostic",
    "DiagnosticsSink",
    "LoggerDiagnostics",
    "LoggingConfig",
    "LoggingHandle",
    "RecordingDiagnostics",
    "get_active_logging_handle",
    "get_logger",
    "logging_config_from_settings",
    "setup_logging",
    "shutdown_logging",
]
