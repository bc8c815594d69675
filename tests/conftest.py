"""Shared fixtures: synthetic decoded event streams."""

import pytest

from cs2coach.core.config import reset_config
from cs2coach.core.constants import Team
from cs2coach.core.events import (
    DecodedEvent,
    ItemDrop,
    ItemEquip,
    ItemPickup,
    Participant,
    PlayerBlind,
    PlayerDeath,
    PlayerDisconnect,
    PlayerHurt,
    PlayerSpawn,
    RoundEnd,
    RoundStart,
    ServerInfo,
    WeaponFire,
)
from cs2coach.core.session import parse

STEAM_BASE = 76561198000000000


class MatchBuilder:
    """Builds a decoded event stream tick by tick."""

    def __init__(self, map_name: str = "de_mirage", tick_interval: float = 1 / 64):
        self.events: list[DecodedEvent] = []
        self._next_user_id = 1
        if map_name is not None:
            self.add(0, ServerInfo(map_name=map_name, tick_interval=tick_interval))

    def player(self, name: str, team: int = Team.CT, steam_id: int | None = None) -> Participant:
        user_id = self._next_user_id
        self._next_user_id += 1
        return Participant(
            user_id=user_id,
            steam_id=STEAM_BASE + user_id if steam_id is None else steam_id,
            name=name,
            team=int(team),
        )

    def add(self, tick: float, data) -> "MatchBuilder":
        self.events.append(DecodedEvent(tick=tick, data=data))
        return self

    def round_start(self, tick: float) -> "MatchBuilder":
        return self.add(tick, RoundStart())

    def round_end(self, tick: float, winner: int) -> "MatchBuilder":
        return self.add(tick, RoundEnd(winning_team=int(winner), reason=0))

    def spawn(self, tick: float, *players: Participant) -> "MatchBuilder":
        for p in players:
            self.add(tick, PlayerSpawn(player=p, team=p.team))
        return self

    def kill(
        self,
        tick: float,
        killer: Participant,
        victim: Participant,
        weapon: str = "ak47",
        headshot: bool = False,
        assister: Participant | None = None,
    ) -> "MatchBuilder":
        return self.add(
            tick,
            PlayerDeath(
                killer=killer, victim=victim, weapon=weapon, headshot=headshot, assister=assister
            ),
        )

    def fire(self, tick: float, player: Participant, weapon: str = "ak47") -> "MatchBuilder":
        return self.add(tick, WeaponFire(player=player, weapon=weapon))

    def hurt(
        self,
        tick: float,
        attacker: Participant,
        victim: Participant,
        damage: int,
        weapon: str = "ak47",
    ) -> "MatchBuilder":
        return self.add(
            tick,
            PlayerHurt(
                attacker=attacker,
                victim=victim,
                weapon=weapon,
                damage=damage,
                health_remaining=max(0, 100 - damage),
            ),
        )

    def blind(
        self, tick: float, attacker: Participant, victim: Participant, duration: float
    ) -> "MatchBuilder":
        return self.add(
            tick, PlayerBlind(victim=victim, attacker=attacker, blind_duration=duration)
        )

    def pickup(self, tick: float, player: Participant, item: str) -> "MatchBuilder":
        return self.add(tick, ItemPickup(player=player, item=item))

    def equip(self, tick: float, player: Participant, item: str) -> "MatchBuilder":
        return self.add(tick, ItemEquip(player=player, item=item))

    def drop(self, tick: float, player: Participant, item: str) -> "MatchBuilder":
        return self.add(tick, ItemDrop(player=player, item=item))

    def disconnect(self, tick: float, player: Participant) -> "MatchBuilder":
        return self.add(tick, PlayerDisconnect(player=player))

    def parse(self):
        return parse(self.events)


@pytest.fixture
def builder():
    """A fresh match builder with ServerInfo at tick 0 (64 tick, de_mirage)."""
    return MatchBuilder()


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from user config files and CS2COACH_* variables."""
    for var in (
        "CS2COACH_LOG_LEVEL",
        "CS2COACH_LOG_FILE",
        "CS2COACH_TRAINING_DIR",
        "CS2COACH_TRADE_WINDOW_TICKS",
        "CS2COACH_FLASH_WINDOW_TICKS",
        "CS2COACH_FLASH_MIN_DURATION",
        "CS2COACH_BUY_TIME_SECONDS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("cs2coach.core.config.get_default_config_paths", lambda: [])
    reset_config()
    yield
    reset_config()


@pytest.fixture
def builder_factory():
    """The MatchBuilder class, for streams with a custom ServerInfo."""
    return MatchBuilder
