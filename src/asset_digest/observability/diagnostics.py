"""Injected warning sinks for the fingerprinting engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Protocol, runtime_checkable

WARNING_PREFIX: Final[str] = "asset-digest WARNING: "


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receives non-fatal conditions raised while a run proceeds."""

    def warn(self, message: str, **fields: str) -> None: ...


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One recorded warning with its structured context."""

    message: str
    fields: tuple[tuple[str, str], ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {"message": self.message, "fields": dict(self.fields)}


class LoggerDiagnostics:
    """Forward warnings to a ``logging.Logger`` as WARNING records."""

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def warn(self, message: str, **fields: str) -> None:
        self._logger.warning(WARNING_PREFIX + message, extra={"diagnostic": dict(fields)})


@dataclass(slots=True)
class RecordingDiagnostics:
    """Collect warnings in memory, optionally forwarding them to another sink."""

    forward_to: DiagnosticsSink | None = None
    records: list[Diagnostic] = field(default_factory=list)

    def warn(self, message: str, **fields: str) -> None:
        self.records.append(Diagnostic(message=message, fields=tuple(sorted(fields.items()))))
        if self.forward_to is not None:
            self.forward_to.warn(message, **fields)

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(record.message for record in self.records)


__all__ = [
    "Diagnostic",
    "DiagnosticsSink",
    "LoggerDiagnostics",
    "RecordingDiagnostics",
    "WARNING_PREFIX",
]
