"""
Utility Analysis Module for cs2coach

Implements utility (grenade) tracking and effectiveness:
- Flash assists (kills on a victim the killer had just blinded)
- Enemies flashed and total blind time inflicted
- HE grenade and incendiary damage
- Team damage from utility
"""

import logging
from dataclasses import dataclass, field

from cs2coach.core.config import AnalysisConfig, get_config
from cs2coach.core.constants import UTILITY_DAMAGE_WEAPONS, EventType, Team
from cs2coach.core.events import Event, Participant
from cs2coach.core.models import MatchLedger
from cs2coach.core.utils import normalize_weapon_name
from cs2coach.domains.windows import EventIndex, WindowDirection

logger = logging.getLogger(__name__)


@dataclass
class FlashAssist:
    """A kill enabled by the killer's own flashbang."""

    kill: Event
    blind: Event

    @property
    def killer_id(self) -> int:
        return self.kill.data.killer.player_id

    @property
    def victim_id(self) -> int:
        return self.kill.data.victim.player_id

    @property
    def blind_duration(self) -> float:
        return self.blind.data.blind_duration

    @property
    def delta_ticks(self) -> float:
        return self.kill.tick - self.blind.tick


@dataclass
class PlayerUtilityStats:
    """Utility statistics for a single player."""

    player_id: int

    flash_assists: int = 0
    flashbangs_thrown: int = 0
    enemies_flashed: int = 0
    blind_time_inflicted: float = 0.0  # Seconds, enemies only

    utility_damage: int = 0  # HE + fire damage to non-teammates
    team_damage: int = 0  # HE + fire damage to known teammates


@dataclass
class UtilityAnalysisResult:
    """Complete utility analysis for a match."""

    flash_assists: list[FlashAssist] = field(default_factory=list)
    player_stats: dict[int, PlayerUtilityStats] = field(default_factory=dict)

    def stats_for(self, player_id: int) -> PlayerUtilityStats:
        return self.player_stats.get(player_id) or PlayerUtilityStats(player_id=player_id)


def are_teammates(a: Participant, b: Participant) -> bool:
    """True only when both references carry the same playing team."""
    return a.team == b.team and a.team in (Team.TERRORIST, Team.CT)


def find_flash_assist(
    index: EventIndex,
    kill: Event,
    window_ticks: int,
    min_duration: float,
) -> Event | None:
    """
    Find the blind that set up a kill, if any.

    A kill by K on V is flash-assisted when V was blinded by K for at least
    ``min_duration`` seconds no more than ``window_ticks`` before the kill.

    Returns:
        The most recent qualifying PlayerBlind event, or None
    """
    data = kill.data
    killer_id = data.killer.player_id
    victim_id = data.victim.player_id
    if killer_id == victim_id:
        return None

    def blinded_by_killer(candidate: Event) -> bool:
        blind = candidate.data
        return (
            blind.victim.player_id == victim_id
            and blind.attacker.player_id == killer_id
            and blind.blind_duration >= min_duration
        )

    blinds = index.find_in_window(
        EventType.PLAYER_BLIND, kill, window_ticks, WindowDirection.BEFORE, blinded_by_killer
    )
    return blinds[-1] if blinds else None


class UtilityAnalyzer:
    """Analyzer for utility usage from a finalized match ledger."""

    def __init__(
        self,
        ledger: MatchLedger,
        config: AnalysisConfig | None = None,
        index: EventIndex | None = None,
    ):
        self.ledger = ledger
        self.config = config or get_config().analysis
        self.index = index if index is not None else EventIndex(ledger.events)
        self._stats: dict[int, PlayerUtilityStats] = {}

    def _player(self, player_id: int) -> PlayerUtilityStats:
        stats = self._stats.get(player_id)
        if stats is None:
            stats = PlayerUtilityStats(player_id=player_id)
            self._stats[player_id] = stats
        return stats

    def analyze(self) -> UtilityAnalysisResult:
        """
        Run utility analysis on the ledger.

        Returns:
            UtilityAnalysisResult with flash assists and per-player stats.
        """
        self._stats = {}

        assists = self._find_flash_assists()
        self._count_flashes()
        self._count_utility_damage()

        logger.info(
            f"Utility analysis complete. {len(assists)} flash assists, "
            f"{sum(s.utility_damage for s in self._stats.values())} utility damage"
        )
        return UtilityAnalysisResult(flash_assists=assists, player_stats=dict(self._stats))

    def _find_flash_assists(self) -> list[FlashAssist]:
        assists: list[FlashAssist] = []
        for kill in self.index.events_of_type(EventType.PLAYER_DEATH):
            blind = find_flash_assist(
                self.index,
                kill,
                self.config.flash_assist_window_ticks,
                self.config.flash_assist_min_duration,
            )
            if blind is None:
                continue
            assist = FlashAssist(kill=kill, blind=blind)
            self._player(assist.killer_id).flash_assists += 1
            assists.append(assist)
        return assists

    def _count_flashes(self) -> None:
        for event in self.index.events_of_type(EventType.FLASHBANG_DETONATE):
            self._player(event.data.thrower.player_id).flashbangs_thrown += 1

        for event in self.index.events_of_type(EventType.PLAYER_BLIND):
            blind = event.data
            if blind.attacker.player_id == blind.victim.player_id:
                continue
            if are_teammates(blind.attacker, blind.victim):
                continue
            stats = self._player(blind.attacker.player_id)
            stats.enemies_flashed += 1
            stats.blind_time_inflicted += blind.blind_duration

    def _count_utility_damage(self) -> None:
        for event in self.index.events_of_type(EventType.PLAYER_HURT):
            hurt = event.data
            if normalize_weapon_name(hurt.weapon) not in UTILITY_DAMAGE_WEAPONS:
                continue
            if hurt.attacker.player_id == hurt.victim.player_id:
                continue
            stats = self._player(hurt.attacker.player_id)
            if are_teammates(hurt.attacker, hurt.victim):
                stats.team_damage += hurt.damage
            else:
                stats.utility_damage += hurt.damage


def analyze_utility(
    ledger: MatchLedger, config: AnalysisConfig | None = None
) -> UtilityAnalysisResult:
    """Convenience function to analyze utility usage from a match ledger."""
    return UtilityAnalyzer(ledger, config).analyze()
