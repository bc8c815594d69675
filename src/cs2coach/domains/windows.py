"""
Temporal Window Analyzer

Generic windowed-correlation primitive: "find events of type T within N
ticks before/after a reference point, matching a predicate". Trade kill,
clutch and flash assist detection are all built on it.

Ordering between events always uses (tick, sequence), so two events on the
same tick are never ambiguous: an event on the reference tick counts as
"before" only if its sequence number is lower than the reference event's.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections import defaultdict
from collections.abc import Callable, Iterable
from enum import Enum

from cs2coach.core.constants import EventType
from cs2coach.core.events import Event


class WindowDirection(Enum):
    """Which side of the reference point to search."""

    BEFORE = "before"
    AFTER = "after"
    AROUND = "around"


Predicate = Callable[[Event], bool]


def _reference_key(reference: Event | float) -> tuple[float, float]:
    """Order key of the reference point; a bare tick sits between same-tick events."""
    if isinstance(reference, Event):
        return (reference.tick, reference.sequence)
    return (float(reference), -0.5)


class EventIndex:
    """
    Per-type, order-sorted index over ledger events.

    Build once per finalized ledger and reuse for every query.
    """

    def __init__(self, events: Iterable[Event]):
        by_type: dict[EventType, list[Event]] = defaultdict(list)
        for event in events:
            by_type[event.type].append(event)

        self._events: dict[EventType, list[Event]] = {}
        self._keys: dict[EventType, list[tuple[float, int]]] = {}
        for event_type, typed in by_type.items():
            typed.sort(key=lambda e: e.order_key)
            self._events[event_type] = typed
            self._keys[event_type] = [e.order_key for e in typed]

    def events_of_type(self, event_type: EventType) -> list[Event]:
        return list(self._events.get(event_type, ()))

    def find_in_window(
        self,
        event_type: EventType,
        reference: Event | float,
        window_ticks: float,
        direction: WindowDirection,
        predicate: Predicate | None = None,
    ) -> list[Event]:
        """
        Find events of a type within a tick window of a reference point.

        The window is inclusive: an event exactly ``window_ticks`` away
        qualifies. The reference event itself is never returned.

        Args:
            event_type: Type of events to search
            reference: Reference event, or a bare tick
            window_ticks: Maximum tick distance from the reference
            direction: Search before, after, or on both sides of the reference
            predicate: Optional filter applied to each candidate

        Returns:
            Matching events in ledger order
        """
        typed = self._events.get(event_type)
        if not typed:
            return []
        keys = self._keys[event_type]
        ref_key = _reference_key(reference)
        ref_tick = ref_key[0]

        lo, hi = 0, len(typed)
        if direction in (WindowDirection.BEFORE, WindowDirection.AROUND):
            lo = bisect_left(keys, (ref_tick - window_ticks, -1))
        else:
            lo = bisect_right(keys, ref_key)
        if direction in (WindowDirection.AFTER, WindowDirection.AROUND):
            hi = bisect_right(keys, (ref_tick + window_ticks, float("inf")))
        else:
            hi = bisect_left(keys, ref_key)

        found = []
        for event in typed[lo:hi]:
            if isinstance(reference, Event) and event.id == reference.id:
                continue
            if predicate is None or predicate(event):
                found.append(event)
        return found


def find_in_window(
    events: Iterable[Event],
    event_type: EventType,
    reference: Event | float,
    window_ticks: float,
    direction: WindowDirection,
    predicate: Predicate | None = None,
) -> list[Event]:
    """One-off window query over a plain event sequence."""
    return EventIndex(events).find_in_window(
        event_type, reference, window_ticks, direction, predicate
    )
