"""
Player and match records produced by a parse session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cs2coach.core.errors import PlayerNotFoundError
from cs2coach.core.events import Event


@dataclass
class WeaponRecord:
    """Per-weapon usage for one player."""

    weapon_name: str
    kills: int = 0
    total_shots: int = 0
    hits: int = 0

    @property
    def accuracy(self) -> float:
        return self.hits / self.total_shots if self.total_shots > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "weapon_name": self.weapon_name,
            "kills": self.kills,
            "total_shots": self.total_shots,
            "hits": self.hits,
            "accuracy": round(self.accuracy, 4),
        }


@dataclass
class PlayerRecord:
    """Canonical per-player statistics for one match."""

    display_name: str
    stable_id: int
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshot_count: int = 0
    weapons: list[WeaponRecord] = field(default_factory=list)
    auxiliary_counters: dict[str, Any] = field(default_factory=dict)

    @property
    def headshot_percentage(self) -> float:
        """Headshot kills as a percentage of kills (0-100)."""
        if self.kills <= 0:
            return 0.0
        return 100.0 * self.headshot_count / self.kills

    @property
    def total_shots(self) -> int:
        return sum(w.total_shots for w in self.weapons)

    @property
    def total_hits(self) -> int:
        return sum(w.hits for w in self.weapons)

    @property
    def accuracy(self) -> float:
        """Overall hit fraction across all weapons."""
        shots = self.total_shots
        return self.total_hits / shots if shots > 0 else 0.0

    @property
    def average_weapon_accuracy(self) -> float:
        """Mean of per-weapon accuracy over the weapons that were fired."""
        fired = [w.accuracy for w in self.weapons if w.total_shots > 0]
        return sum(fired) / len(fired) if fired else 0.0

    def weapon(self, weapon_name: str) -> WeaponRecord:
        """Get the record for a weapon, creating it on first use."""
        for record in self.weapons:
            if record.weapon_name == weapon_name:
                return record
        record = WeaponRecord(weapon_name=weapon_name)
        self.weapons.append(record)
        return record

    def to_dict(self) -> dict[str, Any]:
        return {
            "display_name": self.display_name,
            "stable_id": self.stable_id,
            "kills": self.kills,
            "deaths": self.deaths,
            "assists": self.assists,
            "headshot_count": self.headshot_count,
            "headshot_percentage": round(self.headshot_percentage, 2),
            "weapons": [w.to_dict() for w in self.weapons],
            "auxiliary_counters": dict(self.auxiliary_counters),
        }


@dataclass
class PlayerFragment(PlayerRecord):
    """
    Transient stat accumulator for one raw participant reference.

    Keyed by the raw user id plus the (tick, sequence) of the event that
    opened it. Sealed once merged; mutating a sealed fragment is a bug.
    """

    raw_id: int = 0
    tick: float = 0.0
    sequence: int = 0
    sealed: bool = False

    @property
    def key(self) -> tuple[int, float, int]:
        return (self.raw_id, self.tick, self.sequence)

    @property
    def order_key(self) -> tuple[float, int]:
        return (self.tick, self.sequence)

    def seal(self) -> None:
        self.sealed = True

    def check_open(self) -> None:
        if self.sealed:
            raise RuntimeError(f"Fragment {self.key} for {self.display_name} is already merged")

    def bump(self, counter: str, amount: float = 1) -> None:
        """Increment a numeric auxiliary counter."""
        self.check_open()
        self.auxiliary_counters[counter] = self.auxiliary_counters.get(counter, 0) + amount


@dataclass
class MatchLedger:
    """A finalized parse: ordered events plus reconciled players."""

    map_name: str
    tick_rate: int
    events: tuple[Event, ...] = ()
    players: dict[int, PlayerRecord] = field(default_factory=dict)

    def get_player(self, player_id: int) -> PlayerRecord:
        try:
            return self.players[player_id]
        except KeyError:
            raise PlayerNotFoundError(player_id, self.player_names()) from None

    def find_player(self, query: str | int) -> PlayerRecord:
        """
        Look a player up by stable id or display name (case-insensitive).

        Raises:
            PlayerNotFoundError: If no player matches
        """
        if isinstance(query, int) or (isinstance(query, str) and query.lstrip("-").isdigit()):
            player_id = int(query)
            if player_id in self.players:
                return self.players[player_id]

        if isinstance(query, str):
            wanted = query.strip().lower()
            for record in self.players.values():
                if record.display_name.lower() == wanted:
                    return record

        raise PlayerNotFoundError(query, self.player_names())

    def player_names(self) -> list[str]:
        return sorted(p.display_name for p in self.players.values())
