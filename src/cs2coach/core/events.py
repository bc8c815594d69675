"""
Decoded event vocabulary.

Every event the decoder hands to the engine is one of the frozen dataclasses
below. Each variant carries strongly named fields and a class-level
``event_type`` tag, so analyzers dispatch with ``isinstance`` instead of
probing dictionaries.

Participants are referenced through ``Participant``. The decoder fills in the
transient ``user_id`` slot plus whatever identity it captured at that tick;
the parse session binds ``player_id`` (the stable identifier) on ingest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from cs2coach.core.constants import EventType


@dataclass(frozen=True)
class Participant:
    """A decoder reference to a player at one point in the stream."""

    user_id: int
    steam_id: int = 0
    name: str = ""
    team: int = 0
    # Stable identifier, bound by the parse session at first sighting
    player_id: int | None = None

    @property
    def is_bound(self) -> bool:
        return self.player_id is not None


@dataclass(frozen=True)
class ServerInfo:
    event_type: ClassVar[EventType] = EventType.SERVER_INFO

    map_name: str = ""
    tick_interval: float = 0.0  # Seconds per tick


@dataclass(frozen=True)
class PlayerDeath:
    event_type: ClassVar[EventType] = EventType.PLAYER_DEATH

    killer: Participant | None = None
    victim: Participant | None = None
    weapon: str = ""
    headshot: bool = False
    assister: Participant | None = None


@dataclass(frozen=True)
class WeaponFire:
    event_type: ClassVar[EventType] = EventType.WEAPON_FIRE

    player: Participant | None = None
    weapon: str = ""


@dataclass(frozen=True)
class PlayerHurt:
    event_type: ClassVar[EventType] = EventType.PLAYER_HURT

    attacker: Participant | None = None
    victim: Participant | None = None
    weapon: str = ""
    damage: int = 0  # Health damage
    armor_damage: int = 0
    health_remaining: int = 0


@dataclass(frozen=True)
class RoundStart:
    event_type: ClassVar[EventType] = EventType.ROUND_START


@dataclass(frozen=True)
class RoundEnd:
    event_type: ClassVar[EventType] = EventType.ROUND_END

    winning_team: int = 0  # Team number (2=T, 3=CT)
    reason: int = 0  # RoundEndReason value from the game event


@dataclass(frozen=True)
class PlayerSpawn:
    event_type: ClassVar[EventType] = EventType.PLAYER_SPAWN

    player: Participant | None = None
    team: int = 0


@dataclass(frozen=True)
class ItemPickup:
    event_type: ClassVar[EventType] = EventType.ITEM_PICKUP

    player: Participant | None = None
    item: str = ""


@dataclass(frozen=True)
class ItemEquip:
    event_type: ClassVar[EventType] = EventType.ITEM_EQUIP

    player: Participant | None = None
    item: str = ""


@dataclass(frozen=True)
class ItemDrop:
    event_type: ClassVar[EventType] = EventType.ITEM_DROP

    player: Participant | None = None
    item: str = ""


@dataclass(frozen=True)
class FlashbangDetonate:
    event_type: ClassVar[EventType] = EventType.FLASHBANG_DETONATE

    thrower: Participant | None = None
    position: tuple[float, float, float] = field(default=(0.0, 0.0, 0.0))


@dataclass(frozen=True)
class PlayerBlind:
    event_type: ClassVar[EventType] = EventType.PLAYER_BLIND

    victim: Participant | None = None
    attacker: Participant | None = None
    blind_duration: float = 0.0  # Seconds


@dataclass(frozen=True)
class PlayerTeam:
    event_type: ClassVar[EventType] = EventType.PLAYER_TEAM

    player: Participant | None = None
    team: int = 0


@dataclass(frozen=True)
class PlayerDisconnect:
    event_type: ClassVar[EventType] = EventType.PLAYER_DISCONNECT

    player: Participant | None = None


@dataclass(frozen=True)
class MoneyAdjust:
    event_type: ClassVar[EventType] = EventType.MONEY_ADJUST

    player: Participant | None = None
    amount: int = 0


EventData = (
    ServerInfo
    | PlayerDeath
    | WeaponFire
    | PlayerHurt
    | RoundStart
    | RoundEnd
    | PlayerSpawn
    | ItemPickup
    | ItemEquip
    | ItemDrop
    | FlashbangDetonate
    | PlayerBlind
    | PlayerTeam
    | PlayerDisconnect
    | MoneyAdjust
)

EVENT_CLASSES: dict[EventType, type] = {
    cls.event_type: cls
    for cls in (
        ServerInfo,
        PlayerDeath,
        WeaponFire,
        PlayerHurt,
        RoundStart,
        RoundEnd,
        PlayerSpawn,
        ItemPickup,
        ItemEquip,
        ItemDrop,
        FlashbangDetonate,
        PlayerBlind,
        PlayerTeam,
        PlayerDisconnect,
        MoneyAdjust,
    )
}

# Participant-valued fields that must be present for the event to carry information
REQUIRED_PARTICIPANTS: dict[EventType, tuple[str, ...]] = {
    EventType.PLAYER_DEATH: ("killer", "victim"),
    EventType.WEAPON_FIRE: ("player",),
    EventType.PLAYER_HURT: ("attacker", "victim"),
    EventType.PLAYER_SPAWN: ("player",),
    EventType.ITEM_PICKUP: ("player",),
    EventType.ITEM_EQUIP: ("player",),
    EventType.ITEM_DROP: ("player",),
    EventType.FLASHBANG_DETONATE: ("thrower",),
    EventType.PLAYER_BLIND: ("victim", "attacker"),
    EventType.PLAYER_TEAM: ("player",),
    EventType.PLAYER_DISCONNECT: ("player",),
    EventType.MONEY_ADJUST: ("player",),
}

PARTICIPANT_FIELDS = ("killer", "victim", "assister", "player", "attacker", "thrower")


def participants_of(data: EventData) -> dict[str, Participant]:
    """Return the participant-valued fields that are set on an event."""
    found: dict[str, Participant] = {}
    for name in PARTICIPANT_FIELDS:
        value = getattr(data, name, None)
        if isinstance(value, Participant):
            found[name] = value
    return found


def has_required_participants(data: EventData) -> bool:
    """Check that every participant the event type depends on is present."""
    for name in REQUIRED_PARTICIPANTS.get(data.event_type, ()):
        if getattr(data, name, None) is None:
            return False
    return True


@dataclass(frozen=True)
class Event:
    """A ledger entry: one decoded event stamped with its tick and sequence."""

    id: str
    tick: float
    sequence: int
    data: EventData

    @property
    def type(self) -> EventType:
        return self.data.event_type

    @property
    def order_key(self) -> tuple[float, int]:
        """Total order over the ledger: tick first, then same-tick sequence."""
        return (self.tick, self.sequence)

    def __repr__(self) -> str:
        return f"Event[type={self.type}, tick={self.tick}, seq={self.sequence}]"


@dataclass(frozen=True)
class DecodedEvent:
    """What the decoder yields: event data plus the tick it happened on."""

    tick: float
    data: EventData
