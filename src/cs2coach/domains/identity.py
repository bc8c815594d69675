"""
Identity Reconciliation for cs2coach

The decoder references players through transient slots (user ids) which can
change when a player reconnects, so stats accumulate in several fragments
per player during a parse. This module:
- Binds every participant reference to one stable player id
- Tracks the open fragment for each raw user id
- Folds fragments sharing a stable id into one canonical PlayerRecord
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace

from cs2coach.core.errors import ReconciliationError
from cs2coach.core.events import Participant
from cs2coach.core.models import PlayerFragment, PlayerRecord

logger = logging.getLogger(__name__)


def _is_numeric(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class IdentityRegistry:
    """
    Assigns stable player ids at first sighting.

    A valid SteamID64 is the stable id. Participants without one (bots,
    local recordings) get a synthetic negative id bound to their user id
    until that slot disconnects. A released slot carries nothing over to
    whoever takes it next.
    """

    def __init__(self) -> None:
        self._by_user_id: dict[int, int] = {}
        self._next_synthetic = -1

    def resolve(self, participant: Participant) -> int:
        if participant.steam_id > 0:
            self._by_user_id[participant.user_id] = participant.steam_id
            return participant.steam_id

        bound = self._by_user_id.get(participant.user_id)
        if bound is not None:
            return bound

        player_id = self._next_synthetic
        self._next_synthetic -= 1
        self._by_user_id[participant.user_id] = player_id
        logger.debug(f"Assigned synthetic id {player_id} to {participant.name!r}")
        return player_id

    def bind(self, participant: Participant) -> Participant:
        """Return the participant with its stable ``player_id`` filled in."""
        if participant.is_bound:
            return participant
        return replace(participant, player_id=self.resolve(participant))

    def release(self, participant: Participant) -> None:
        """Forget the binding held by a participant's user id slot."""
        self._by_user_id.pop(participant.user_id, None)


class FragmentTracker:
    """
    Owns the open fragment for each raw user id during a parse.

    The first stat-affecting event for a raw id opens a fragment; later
    events for the same raw id reuse it until the scope closes (the
    participant disconnects).
    """

    def __init__(self) -> None:
        self._open: dict[int, PlayerFragment] = {}
        self._fragments: list[PlayerFragment] = []

    def fragment_for(self, participant: Participant, tick: float, sequence: int) -> PlayerFragment:
        """Get (or open) the accumulator for a bound participant."""
        if participant.player_id is None:
            raise ValueError(f"Participant {participant.name!r} has no stable id")

        fragment = self._open.get(participant.user_id)
        if fragment is not None and fragment.stable_id == participant.player_id:
            if participant.name:
                fragment.display_name = participant.name
            return fragment

        fragment = PlayerFragment(
            display_name=participant.name or f"Player_{str(participant.player_id)[-4:]}",
            stable_id=participant.player_id,
            raw_id=participant.user_id,
            tick=tick,
            sequence=sequence,
        )
        self._open[participant.user_id] = fragment
        self._fragments.append(fragment)
        return fragment

    def close_scope(self, participant: Participant) -> None:
        """End the correlation scope for a raw id; the next sighting opens a new fragment."""
        self._open.pop(participant.user_id, None)

    @property
    def fragments(self) -> list[PlayerFragment]:
        return list(self._fragments)


def merge_fragments(fragments: Iterable[PlayerFragment]) -> PlayerRecord:
    """
    Fold fragments of one player into a canonical record.

    Fragments are applied in chronological (tick, sequence) order. Counts and
    weapon numbers are summed; the headshot percentage follows from the summed
    headshot count and kills. Numeric auxiliary counters are summed, other
    values take the last fragment's value, as do the display name and id.

    Raises:
        ReconciliationError: If the group is empty
    """
    ordered = sorted(fragments, key=lambda f: f.order_key)
    if not ordered:
        raise ReconciliationError("Cannot merge an empty fragment group")

    last = ordered[-1]
    record = PlayerRecord(display_name=last.display_name, stable_id=last.stable_id)

    for fragment in ordered:
        record.kills += fragment.kills
        record.deaths += fragment.deaths
        record.assists += fragment.assists
        record.headshot_count += fragment.headshot_count

        for weapon in fragment.weapons:
            merged = record.weapon(weapon.weapon_name)
            merged.kills += weapon.kills
            merged.total_shots += weapon.total_shots
            merged.hits += weapon.hits

        for key, value in fragment.auxiliary_counters.items():
            current = record.auxiliary_counters.get(key)
            if _is_numeric(value) and (current is None or _is_numeric(current)):
                record.auxiliary_counters[key] = (current or 0) + value
            else:
                record.auxiliary_counters[key] = value

    return record


def reconcile(fragments: Iterable[PlayerFragment]) -> dict[int, PlayerRecord]:
    """
    Group fragments by stable id and merge each group.

    Every fragment is sealed afterwards.

    Returns:
        Mapping of stable id -> canonical PlayerRecord
    """
    groups: dict[int, list[PlayerFragment]] = defaultdict(list)
    for fragment in fragments:
        groups[fragment.stable_id].append(fragment)

    players: dict[int, PlayerRecord] = {}
    for stable_id, group in groups.items():
        players[stable_id] = merge_fragments(group)
        for fragment in group:
            fragment.seal()
        if len(group) > 1:
            logger.debug(f"Merged {len(group)} fragments for {players[stable_id].display_name}")

    return players
