"""Structured observability events.

Workflows describe what happened as ObservabilityEvent objects and hand them
to an injected EventSink. The sink decides whether the event is logged,
buffered for a logs panel, or both.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Iterable, List, Optional, Protocol

from tireworks.utils.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ObservabilityEvent:
    name: str
    source: str
    fields: Dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=_utcnow)

    @property
    def is_failure(self) -> bool:
        return self.name.endswith("_failed")


class EventSink(Protocol):
    def emit(self, event: ObservabilityEvent) -> None: ...


class LoggingEventSink:
    """Write events to the standard logger, one line per event."""

    def __init__(self, logger_name: str = "tireworks.events"):
        self._logger = get_logger(logger_name)

    def emit(self, event: ObservabilityEvent) -> None:
        level = logging.WARNING if event.is_failure else logging.INFO
        details = " ".join(f"{k}={v!r}" for k, v in sorted(event.fields.items()))
        self._logger.log(level, "%s.%s %s", event.source, event.name, details)


class MemoryEventSink:
    """Keep the most recent events in memory (logs panel, tests)."""

    def __init__(self, maxlen: Optional[int] = None):
        self.events: Deque[ObservabilityEvent] = deque(maxlen=maxlen)

    def emit(self, event: ObservabilityEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def find(self, name: str) -> List[ObservabilityEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()


class FanOutEventSink:
    """Forward each event to several sinks.

    A failing sink is logged and skipped so the others still receive the event.
    """

    def __init__(self, sinks: Iterable[EventSink]):
        self.sinks = list(sinks)

    def emit(self, event: ObservabilityEvent) -> None:
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception:
                logger.exception("Event sink %r failed on %s", sink, event.name)
