"""Ledger events published by cores and the pool, and the sinks that receive them."""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import BaseModel, Field


class LedgerEvent(BaseModel):
    """One state change: condition lifecycle, accepted bet, payout, configuration."""

    event_type: str
    source: str  # core id or "pool"
    timestamp: int
    condition_id: int | None = None
    receipt_id: int | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class EventSink(Protocol):
    def emit(self, event: LedgerEvent) -> None: ...


class MemorySink:
    """Keeps events in order in memory."""

    def __init__(self) -> None:
        self.events: list[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[LedgerEvent]:
        return [e for e in self.events if e.event_type == event_type]


class NullSink:
    def emit(self, event: LedgerEvent) -> None:
        pass


class FanoutSink:
    """Forward each event to several sinks."""

    def __init__(self, *sinks: EventSink) -> None:
        self.sinks = list(sinks)

    def emit(self, event: LedgerEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)
