"""
Parse Session - drives one match from decoded events to a MatchLedger.

A session pulls events from the decoder stream in order, binds every
participant to its stable id, appends the event to its own ledger and
updates the per-player stat fragments. ``finalize()`` reconciles the
fragments and hands back the finished MatchLedger.

Each session owns its ledger, sequence counters and identity bindings;
nothing is shared between sessions, so independent matches can be parsed
one after another (or side by side) in the same process.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from cs2coach.core.config import AnalysisConfig, get_config
from cs2coach.core.constants import NON_FIREARM_WEAPONS, UTILITY_DAMAGE_WEAPONS
from cs2coach.core.events import (
    DecodedEvent,
    Event,
    EventData,
    ItemDrop,
    ItemPickup,
    MoneyAdjust,
    Participant,
    PlayerBlind,
    PlayerDeath,
    PlayerDisconnect,
    PlayerHurt,
    PlayerSpawn,
    PlayerTeam,
    ServerInfo,
    WeaponFire,
    has_required_participants,
    participants_of,
)
from cs2coach.core.ledger import EventLedger
from cs2coach.core.models import MatchLedger
from cs2coach.core.stream import EventStream, IterableEventStream
from cs2coach.core.utils import PerformanceMonitor, normalize_weapon_name, side_name
from cs2coach.domains.identity import FragmentTracker, IdentityRegistry, reconcile

logger = logging.getLogger(__name__)


class ParseSession:
    """One start-to-finish parse of a single match."""

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config or get_config().analysis
        self.ledger = EventLedger()
        self.new_session()

    def new_session(self) -> None:
        """Reset all per-match state."""
        self.ledger.reset()
        self.identities = IdentityRegistry()
        self.fragments = FragmentTracker()
        self.map_name = ""
        self.tick_rate = self.config.default_tick_rate
        self._saw_server_info = False
        self._dropped = 0
        self._finalized = False

    def ingest(self, decoded: DecodedEvent) -> Event | None:
        """
        Append one decoded event and update player fragments.

        Events missing a participant they depend on are dropped and
        return None.
        """
        if self._finalized:
            raise RuntimeError("Session already finalized; call new_session() first")

        data = decoded.data
        if not has_required_participants(data):
            self._dropped += 1
            logger.debug(f"Dropping {data.event_type} at tick {decoded.tick}: missing participant")
            return None

        data = self._bind_participants(data)
        event = self.ledger.append(data, decoded.tick)
        self._apply(event)
        return event

    def _bind_participants(self, data: EventData) -> EventData:
        people = participants_of(data)
        if not people:
            return data
        bound = {role: self.identities.bind(p) for role, p in people.items()}
        return replace(data, **bound)

    def _fragment(self, participant: Participant, event: Event):
        return self.fragments.fragment_for(participant, event.tick, event.sequence)

    def _apply(self, event: Event) -> None:
        data = event.data

        if isinstance(data, ServerInfo):
            self.map_name = data.map_name
            if data.tick_interval > 0:
                self.tick_rate = round(1 / data.tick_interval)
            self._saw_server_info = True

        elif isinstance(data, PlayerDeath):
            killer = self._fragment(data.killer, event)
            victim = self._fragment(data.victim, event)
            weapon = normalize_weapon_name(data.weapon) or "unknown"

            killer.check_open()
            victim.check_open()
            if data.killer.player_id != data.victim.player_id:
                killer.kills += 1
                if data.headshot:
                    killer.headshot_count += 1
                killer.weapon(weapon).kills += 1
            victim.deaths += 1

            if data.assister is not None and data.assister.player_id not in (
                data.killer.player_id,
                data.victim.player_id,
            ):
                self._fragment(data.assister, event).assists += 1

        elif isinstance(data, WeaponFire):
            weapon = normalize_weapon_name(data.weapon)
            if weapon and weapon not in NON_FIREARM_WEAPONS:
                shooter = self._fragment(data.player, event)
                shooter.check_open()
                shooter.weapon(weapon).total_shots += 1

        elif isinstance(data, PlayerHurt):
            if data.attacker.player_id == data.victim.player_id:
                return
            attacker = self._fragment(data.attacker, event)
            weapon = normalize_weapon_name(data.weapon)
            if weapon and weapon not in NON_FIREARM_WEAPONS:
                attacker.check_open()
                attacker.weapon(weapon).hits += 1
            attacker.bump("damage_dealt", data.damage)
            if weapon in UTILITY_DAMAGE_WEAPONS:
                attacker.bump("grenade_damage", data.damage)

        elif isinstance(data, PlayerBlind):
            if data.attacker.player_id != data.victim.player_id:
                attacker = self._fragment(data.attacker, event)
                attacker.bump("players_blinded")
                attacker.bump("blind_time_inflicted", data.blind_duration)

        elif isinstance(data, (PlayerSpawn, PlayerTeam)):
            player = self._fragment(data.player, event)
            player.check_open()
            player.auxiliary_counters["side"] = side_name(data.team)

        elif isinstance(data, ItemPickup):
            self._fragment(data.player, event).bump("items_picked_up")

        elif isinstance(data, ItemDrop):
            self._fragment(data.player, event).bump("items_dropped")

        elif isinstance(data, MoneyAdjust):
            player = self._fragment(data.player, event)
            if data.amount >= 0:
                player.bump("money_earned", data.amount)
            else:
                player.bump("money_spent", -data.amount)

        elif isinstance(data, PlayerDisconnect):
            self.fragments.close_scope(data.player)
            self.identities.release(data.player)

    def finalize(self) -> MatchLedger:
        """Reconcile fragments and return the finished match."""
        if not self._saw_server_info:
            logger.warning(
                f"No ServerInfo in stream; assuming {self.tick_rate} tick and unknown map"
            )

        players = reconcile(self.fragments.fragments)
        self._finalized = True

        logger.info(
            f"Parsed {len(self.ledger)} events ({self._dropped} dropped), "
            f"{len(players)} players on {self.map_name or 'unknown map'}"
        )
        return MatchLedger(
            map_name=self.map_name,
            tick_rate=self.tick_rate,
            events=self.ledger.events,
            players=players,
        )

    def run(self, stream: EventStream | Iterable[DecodedEvent]) -> MatchLedger:
        """Pull every event from the stream, then finalize."""
        if not hasattr(stream, "next_event"):
            stream = IterableEventStream(stream)

        with PerformanceMonitor("Parsing event stream", log_level=logging.DEBUG):
            while (decoded := stream.next_event()) is not None:
                self.ingest(decoded)
            return self.finalize()


def parse(
    stream: EventStream | Iterable[DecodedEvent], config: AnalysisConfig | None = None
) -> MatchLedger:
    """
    Parse a decoded event stream into a MatchLedger.

    Any error raised by the stream or the ledger propagates; no partial
    ledger is returned.

    Args:
        stream: Decoder stream (``next_event()``) or iterable of DecodedEvent
        config: Analysis settings (defaults to the global config)

    Returns:
        Finalized MatchLedger
    """
    return ParseSession(config).run(stream)
