"""Logging setup for asset-digest with JSON-lines or plain text output."""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, Literal, TextIO

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
LogFormat = Literal["text", "json"]

DEFAULT_LOGGER_NAME: Final[str] = "asset_digest"
_TEXT_FORMAT: Final[str] = "%(message)s"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

_ACTIVE_HANDLE_LOCK = threading.Lock()
_ACTIVE_HANDLE: LoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for console and optional file logging."""

    logger_name: str = DEFAULT_LOGGER_NAME
    level: int | str = "WARNING"
    log_format: LogFormat = "text"
    log_file: Path | str | None = None
    stream: TextIO | None = None


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class LoggingHandle:
    """Runtime handle for an active logging setup."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        handlers: tuple[logging.Handler, ...],
        log_path: Path | None,
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._handlers = handlers
        self._lock = threading.Lock()
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()

    def shutdown(self) -> None:
        with self._lock:
            if self._is_shutdown:
                return
            for handler in self._handlers:
                handler.flush()
                self.logger.removeHandler(handler)
                handler.close()
            self._is_shutdown = True


def setup_logging(config: LoggingConfig | None = None) -> LoggingHandle:
    """Configure the asset-digest logger and return a handle owning its handlers."""

    cfg = config or LoggingConfig()
    _shutdown_previous_active_handle()

    level = _parse_log_level(cfg.level)
    formatter = _build_formatter(cfg.log_format)

    stream_handler = logging.StreamHandler(cfg.stream if cfg.stream is not None else sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stream_handler]

    log_path: Path | None = None
    if cfg.log_file:
        log_path = Path(cfg.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        # File sinks are always machine-readable.
        file_handler.setFormatter(_JsonLineFormatter())
        handlers.append(file_handler)

    logger = logging.getLogger(cfg.logger_name)
    logger.setLevel(level)
    logger.propagate = False

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        logger.addHandler(handler)

    handle = LoggingHandle(logger=logger, handlers=tuple(handlers), log_path=log_path)
    with _ACTIVE_HANDLE_LOCK:
        global _ACTIVE_HANDLE
        _ACTIVE_HANDLE = handle
    return handle


def logging_config_from_settings(
    settings: Mapping[str, object],
    *,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> LoggingConfig:
    """Build a ``LoggingConfig`` from the ``[observability]`` config section."""

    raw_level = settings.get("log_level", "WARNING")
    level: int | str = raw_level if isinstance(raw_level, (int, str)) else "WARNING"
    if verbose:
        level = "DEBUG"
    raw_format = settings.get("log_format", "text")
    log_format: LogFormat = "json" if raw_format == "json" else "text"
    raw_file = settings.get("log_file")
    log_file = raw_file if isinstance(raw_file, str) and raw_file else None
    return LoggingConfig(level=level, log_format=log_format, log_file=log_file, stream=stream)


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Close all handlers of ``handle`` (or the active handle)."""

    global _ACTIVE_HANDLE
    with _ACTIVE_HANDLE_LOCK:
        resolved = handle if handle is not None else _ACTIVE_HANDLE
        if resolved is not None and _ACTIVE_HANDLE is resolved:
            _ACTIVE_HANDLE = None
    if resolved is not None:
        resolved.shutdown()


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the asset-digest hierarchy."""

    full_name = f"{DEFAULT_LOGGER_NAME}.{name}" if name else DEFAULT_LOGGER_NAME
    return logging.getLogger(full_name)


def get_active_logging_handle() -> LoggingHandle | None:
    """Return the currently active handle, if one exists."""
    with _ACTIVE_HANDLE_LOCK:
        return _ACTIVE_HANDLE


def _shutdown_previous_active_handle() -> None:
    global _ACTIVE_HANDLE
    with _ACTIVE_HANDLE_LOCK:
        previous = _ACTIVE_HANDLE
        _ACTIVE_HANDLE = None
    if previous is not None:
        previous.shutdown()


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return _JsonLineFormatter()
    if log_format == "text":
        return logging.Formatter(_TEXT_FORMAT)
    raise ValueError(f"unsupported log format {log_format!r}; expected 'json' or 'text'")


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    extras: dict[str, JSONValue] = {}
    for key, value in sorted(record.__dict__.items()):
        if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_"):
            continue
        extras[key] = _normalize_json_value(value)
    return extras


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in sorted(value.items())}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
        return [_normalize_json_value(item) for item in items]
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "LogFormat",
    "LoggingConfig",
    "LoggingHandle",
    "get_active_logging_handle",
    "get_logger",
    "logging_config_from_settings",
    "setup_logging",
    "shutdown_logging",
]
