"""Append-only event streams with optimistic concurrency."""

from __future__ import annotations

import dataclasses
import json
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from luminor.platform.clock import Clock, RealClock


@dataclass(frozen=True)
class StoredEvent:
    """An event that has been persisted to a stream."""

    id: str
    stream_id: str
    stream_version: int
    event_type: str
    payload: bytes
    causation_id: str = ""
    correlation_id: str = ""
    recorded_at: datetime | None = None


@dataclass(frozen=True)
class UncommittedEvent:
    """An event that has not yet been persisted."""

    event_type: str
    payload: Any
    causation_id: str = ""
    correlation_id: str = ""


class ConcurrencyConflictError(Exception):
    """Raised when an append fails because the stream version does not match."""

    def __init__(self, message: str = "concurrency conflict: stream version mismatch") -> None:
        super().__init__(message)


@runtime_checkable
class EventStore(Protocol):
    """Interface of an event store."""

    def append(
        self, stream_id: str, expected_version: int, events: list[UncommittedEvent]
    ) -> list[StoredEvent]: ...

    def load_stream(self, stream_id: str) -> list[StoredEvent]: ...


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def encode_payload(payload: Any) -> bytes:
    """Encode an event payload as JSON bytes."""
    try:
        return json.dumps(payload, default=_json_default).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise TypeError(f"marshal event payload: {err}") from err


class InMemoryEventStore:
    """Event store held in memory; appends are all-or-nothing."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or RealClock()
        self._lock = threading.Lock()
        self._streams: dict[str, list[StoredEvent]] = defaultdict(list)

    def append(
        self, stream_id: str, expected_version: int, events: list[UncommittedEvent]
    ) -> list[StoredEvent]:
        """Append events after ``expected_version``; raise on a version mismatch."""
        encoded = [encode_payload(event.payload) for event in events]
        with self._lock:
            stream = self._streams[stream_id]
            if len(stream) != expected_version:
                raise ConcurrencyConflictError()
            recorded_at = self._clock.now()
            stored = [
                StoredEvent(
                    id=str(uuid.uuid4()),
                    stream_id=stream_id,
                    stream_version=version,
                    event_type=event.event_type,
                    payload=raw,
                    causation_id=event.causation_id,
                    correlation_id=event.correlation_id,
                    recorded_at=recorded_at,
                )
                for version, (event, raw) in enumerate(
                    zip(events, encoded), start=expected_version + 1
                )
            ]
            stream.extend(stored)
        return stored

    def load_stream(self, stream_id: str) -> list[StoredEvent]:
        """Return all events of a stream in ascending version order."""
        with self._lock:
            return list(self._streams.get(stream_id, ()))