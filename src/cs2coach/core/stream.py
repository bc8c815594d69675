"""
Decoded event streams.

The demo decoder is an external collaborator. It hands events to the engine
through a pull interface: ``next_event()`` returns the next ``DecodedEvent``
or ``None`` at end of stream. ``JsonlEventStream`` implements that interface
over a JSON-lines dump (one decoded event per line), which is also the format
training records store their events in.

Line format:
    {"type": "PlayerDeath", "tick": 1200,
     "killer": {"user_id": 3, "steam_id": 76561198000000001, "name": "s1mple", "team": 3},
     "victim": {...}, "weapon": "ak47", "headshot": true}
"""

from __future__ import annotations

import dataclasses
import gzip
import json
import logging
import math
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol

from cs2coach.core.constants import EventType
from cs2coach.core.errors import EventStreamError
from cs2coach.core.events import (
    EVENT_CLASSES,
    PARTICIPANT_FIELDS,
    DecodedEvent,
    Event,
    EventData,
    Participant,
)

logger = logging.getLogger(__name__)


class EventStream(Protocol):
    """Pull interface the decoder exposes to the parse session."""

    def next_event(self) -> DecodedEvent | None: ...


class IterableEventStream:
    """Adapts any iterable of DecodedEvent to the pull interface."""

    def __init__(self, events: Iterable[DecodedEvent]):
        self._iterator = iter(events)

    def next_event(self) -> DecodedEvent | None:
        return next(self._iterator, None)


def _participant_from_dict(value: Any, field_name: str) -> Participant | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise EventStreamError(f"Participant field '{field_name}' must be an object, got {value!r}")
    try:
        return Participant(
            user_id=int(value["user_id"]),
            steam_id=int(value.get("steam_id") or 0),
            name=str(value.get("name") or ""),
            team=int(value.get("team") or 0),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise EventStreamError(f"Invalid participant in '{field_name}': {value!r} ({e})") from e


def _scalar_from_json(value: Any, annotation: Any, field_name: str, event_type: EventType) -> Any:
    """Check a JSON scalar against the field's declared type (int, float, bool or str)."""
    type_name = annotation if isinstance(annotation, str) else annotation.__name__
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)

    if type_name == "bool" and isinstance(value, bool):
        return value
    if type_name == "str" and isinstance(value, str):
        return value
    if type_name == "float" and is_number and math.isfinite(value):
        return float(value)
    if type_name == "int" and is_number and (isinstance(value, int) or value.is_integer()):
        return int(value)
    raise EventStreamError(
        f"Invalid {field_name} for {event_type}: expected {type_name}, got {value!r}"
    )


def event_from_dict(record: dict[str, Any]) -> DecodedEvent:
    """
    Build a DecodedEvent from its JSON representation.

    Raises:
        EventStreamError: On unknown type, missing tick or bad field values
    """
    if not isinstance(record, dict):
        raise EventStreamError(f"Event record must be an object, got {type(record).__name__}")

    type_name = record.get("type")
    try:
        event_type = EventType(type_name)
    except ValueError:
        raise EventStreamError(f"Unknown event type: {type_name!r}") from None

    if "tick" not in record:
        raise EventStreamError(f"{event_type} event has no tick")
    try:
        tick = float(record["tick"])
    except (TypeError, ValueError) as e:
        raise EventStreamError(f"{event_type} event has invalid tick {record['tick']!r}") from e
    if not math.isfinite(tick):
        raise EventStreamError(f"{event_type} event has non-finite tick {record['tick']!r}")

    cls = EVENT_CLASSES[event_type]
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in record:
            continue
        value = record[f.name]
        if f.name in PARTICIPANT_FIELDS:
            kwargs[f.name] = _participant_from_dict(value, f.name)
        elif f.name == "position":
            try:
                kwargs[f.name] = tuple(float(v) for v in value)
            except (TypeError, ValueError) as e:
                raise EventStreamError(f"Invalid position for {event_type}: {value!r}") from e
        else:
            kwargs[f.name] = _scalar_from_json(value, f.type, f.name, event_type)

    try:
        data = cls(**kwargs)
    except TypeError as e:
        raise EventStreamError(f"Invalid fields for {event_type}: {e}") from e
    return DecodedEvent(tick=tick, data=data)


def event_to_dict(event: Event | DecodedEvent) -> dict[str, Any]:
    """Serialize an event to the JSON-lines representation."""
    data: EventData = event.data
    record: dict[str, Any] = {"type": str(data.event_type), "tick": event.tick}
    for f in dataclasses.fields(data):
        value = getattr(data, f.name)
        if isinstance(value, Participant):
            value = {
                "user_id": value.user_id,
                "steam_id": value.steam_id,
                "name": value.name,
                "team": value.team,
            }
        elif isinstance(value, tuple):
            value = list(value)
        record[f.name] = value
    return record


class JsonlEventStream:
    """
    Reads decoded events from a JSON-lines file (optionally gzip-compressed).

    Blank lines are skipped. Any malformed line aborts the stream with
    EventStreamError carrying the line number.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Event stream not found: {path}")
        self._lines: Iterator[tuple[int, str]] | None = None
        self._handle = None

    def _open(self) -> None:
        if self.path.suffix.lower() == ".gz":
            self._handle = gzip.open(self.path, "rt", encoding="utf-8")
        else:
            self._handle = open(self.path, encoding="utf-8")
        self._lines = enumerate(self._handle, start=1)

    def next_event(self) -> DecodedEvent | None:
        if self._lines is None:
            self._open()

        for line_no, line in self._lines:
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                self.close()
                raise EventStreamError(f"{self.path}:{line_no}: invalid JSON ({e.msg})") from e
            try:
                return event_from_dict(record)
            except EventStreamError as e:
                self.close()
                raise EventStreamError(f"{self.path}:{line_no}: {e}") from e

        self.close()
        return None

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._lines = iter(())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def read_events(path: str | Path) -> list[DecodedEvent]:
    """Read a whole JSON-lines event stream into memory."""
    stream = JsonlEventStream(path)
    events = []
    with stream:
        while (decoded := stream.next_event()) is not None:
            events.append(decoded)
    logger.debug(f"Read {len(events)} events from {path}")
    return events


def write_events(events: Iterable[Event | DecodedEvent], path: str | Path) -> Path:
    """Write events as JSON lines."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        for event in events:
            f.write(json.dumps(event_to_dict(event)) + "\n")
    return path
