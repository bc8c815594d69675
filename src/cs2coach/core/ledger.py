"""
Event Ledger - the append-only, totally ordered event log of one match.

Events are ordered by tick, and events sharing a tick by a sequence number
drawn from a per-tick counter. The counters belong to the ledger instance and
are cleared by ``reset()``, so two parses never share ordering state.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from dataclasses import asdict

import pandas as pd

from cs2coach.core.constants import EventType
from cs2coach.core.errors import LedgerOrderError
from cs2coach.core.events import Event, EventData, participants_of

logger = logging.getLogger(__name__)


class EventLedger:
    """Append-only log of domain events for one match."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._sequence_numbers: dict[float, int] = {}
        self.reset()

    def reset(self) -> None:
        """Clear all events and per-tick sequence counters."""
        self._events = []
        self._sequence_numbers = {}

    def append(self, data: EventData, tick: float) -> Event:
        """
        Append an event and assign its same-tick sequence number.

        Args:
            data: Typed event payload
            tick: Match tick the event happened on

        Returns:
            The stamped Event

        Raises:
            LedgerOrderError: If tick is earlier than the last appended tick
        """
        tick = float(tick)
        if self._events and tick < self._events[-1].tick:
            raise LedgerOrderError(
                f"Event {data.event_type} at tick {tick} arrived after tick {self._events[-1].tick}"
            )

        sequence = self._sequence_numbers.get(tick, 0)
        self._sequence_numbers[tick] = sequence + 1

        event = Event(id=str(uuid.uuid4()), tick=tick, sequence=sequence, data=data)
        self._events.append(event)
        return event

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    @property
    def last_tick(self) -> float | None:
        return self._events[-1].tick if self._events else None

    def events_of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self._events if e.type == event_type]

    def events_until(self, tick: float) -> list[Event]:
        """All events with tick <= ``tick``, for reconstructing state at that moment."""
        return [e for e in self._events if e.tick <= tick]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Flatten the ledger to one DataFrame row per event.

        Participant fields become ``<field>_id`` / ``<field>_name`` /
        ``<field>_team`` columns keyed on the stable player id.
        """
        rows = []
        for event in self._events:
            row: dict = {
                "id": event.id,
                "type": str(event.type),
                "tick": event.tick,
                "sequence": event.sequence,
            }
            people = participants_of(event.data)
            for key, value in asdict(event.data).items():
                if key in people:
                    continue
                row[key] = value
            for role, participant in people.items():
                row[f"{role}_id"] = participant.player_id
                row[f"{role}_name"] = participant.name
                row[f"{role}_team"] = participant.team
            rows.append(row)

        if not rows:
            return pd.DataFrame(columns=["id", "type", "tick", "sequence"])
        return pd.DataFrame(rows)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)
