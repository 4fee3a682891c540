"""Structured telemetry for the engine: event names, sinks, and a safe emitter.

Sinks are observers only.  A failing sink must never break observation
processing, so engine code goes through :func:`emit_safely`.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

TAXONOMY_EMPTY = "taxonomy.empty"
OBSERVATION_PROCESSED = "observation.processed"
OBSERVATION_FAILED = "observation.failed"
COUNTERS_SWEPT = "counters.swept"
COMMITMENT_FALLBACK = "commitment.fallback"


@dataclass
class TelemetryEvent:
    """Named engine event; attributes hold counts and labels, never page text."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    timestamp_ms: float = field(default_factory=lambda: time.time() * 1000)


@runtime_checkable
class TelemetrySink(Protocol):
    def emit(self, event: TelemetryEvent) -> None: ...


class NoOpTelemetrySink:
    """Default sink; discards every event."""

    def emit(self, event: TelemetryEvent) -> None:
        _ = event


class InMemoryTelemetrySink:
    """Keeps the most recent events, all of them when *maxlen* is None."""

    def __init__(self, maxlen: int | None = None) -> None:
        self.events: deque[TelemetryEvent] = deque(maxlen=maxlen)

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]

    def by_name(self, name: str) -> list[TelemetryEvent]:
        return [e for e in self.events if e.name == name]


def _format_attributes(attributes: dict[str, Any]) -> str:
    return " ".join(f"{key}={attributes[key]}" for key in sorted(attributes))


class LoggerTelemetrySink:
    """Writes one log line per event, ``<name> key=value ...``.

    The raw event is also attached to the record as ``event_name``,
    ``event_timestamp_ms`` and ``event_attributes`` for structured handlers.
    """

    def __init__(
        self,
        logger_name: str = "interest_signal.telemetry",
        level: int = logging.INFO,
    ) -> None:
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def emit(self, event: TelemetryEvent) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        self.logger.log(
            self.level,
            "%s %s",
            event.name,
            _format_attributes(event.attributes),
            extra={
                "event_name": event.name,
                "event_timestamp_ms": event.timestamp_ms,
                "event_attributes": event.attributes,
            },
        )


def emit_safely(sink: TelemetrySink, name: str, **attributes: Any) -> None:
    """Emit *name* on *sink*, logging instead of raising if the sink fails."""
    try:
        sink.emit(TelemetryEvent(name=name, attributes=attributes))
    except Exception:
        logger.exception("Telemetry sink failed on event %s", name)
