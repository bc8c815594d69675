"""
Round Segmentation for cs2coach

Partitions the ledger into per-round windows. A round runs from one
RoundStart up to (not including) the next RoundStart, or to the end of the
ledger. The first RoundEnd inside the window resolves the round.

Events before the first RoundStart (warmup, server info) belong to no round.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cs2coach.core.constants import EventType
from cs2coach.core.events import Event, PlayerDeath
from cs2coach.core.utils import timed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundWindow:
    """All ledger events belonging to one round."""

    number: int  # 1-indexed
    start_event: Event
    events: tuple[Event, ...]
    end_event: Event | None = None

    @property
    def start_tick(self) -> float:
        return self.start_event.tick

    @property
    def is_resolved(self) -> bool:
        """False for truncated rounds that never recorded a winner."""
        return self.end_event is not None

    @property
    def winner(self) -> int | None:
        if self.end_event is None:
            return None
        return self.end_event.data.winning_team

    @property
    def end_tick(self) -> float:
        """Tick of the RoundEnd, or of the last event in a truncated round."""
        if self.end_event is not None:
            return self.end_event.tick
        return self.events[-1].tick

    def deaths(self) -> list[Event]:
        """Death events in ledger order."""
        return [e for e in self.events if isinstance(e.data, PlayerDeath)]

    def of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.type == event_type]


@timed
def segment_rounds(events: Sequence[Event]) -> list[RoundWindow]:
    """
    Split ordered ledger events into round windows.

    Args:
        events: Ledger events in (tick, sequence) order

    Returns:
        Round windows in match order; empty when the match has no RoundStart
    """
    windows: list[RoundWindow] = []
    current: list[Event] = []

    def close() -> None:
        if not current:
            return
        end_event = next((e for e in current if e.type == EventType.ROUND_END), None)
        windows.append(
            RoundWindow(
                number=len(windows) + 1,
                start_event=current[0],
                events=tuple(current),
                end_event=end_event,
            )
        )

    pre_round = 0
    for event in events:
        if event.type == EventType.ROUND_START:
            close()
            current = [event]
        elif current:
            current.append(event)
        else:
            pre_round += 1
    close()

    if not windows:
        logger.warning("No round boundaries found; treating the match as a single round")
    else:
        unresolved = sum(1 for w in windows if not w.is_resolved)
        if unresolved:
            logger.info(f"{unresolved} of {len(windows)} rounds have no RoundEnd event")
    if pre_round:
        logger.debug(f"{pre_round} events precede the first RoundStart")

    return windows


def count_rounds(events: Iterable[Event]) -> int:
    """Rounds-played denominator: number of RoundStart events, at least 1."""
    return max(1, sum(1 for e in events if e.type == EventType.ROUND_START))


def round_for_tick(windows: Sequence[RoundWindow], tick: float) -> RoundWindow | None:
    """Find the round window containing a tick, if any."""
    found = None
    for window in windows:
        if window.start_tick <= tick:
            found = window
        else:
            break
    return found
