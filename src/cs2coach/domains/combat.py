"""
Combat Analysis Module for cs2coach

Implements the combat correlation metrics:
- Trade kill detection (128-tick window, both directions per player)
- Opening duel (first death of each round) statistics
- Clutch detection and outcome

Players are identified by their stable ``player_id`` throughout; display
names are only looked up for log output.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from cs2coach.core.config import AnalysisConfig, get_config
from cs2coach.core.constants import EventType, Team
from cs2coach.core.events import Event, Participant, PlayerDeath, PlayerSpawn, PlayerTeam
from cs2coach.core.models import MatchLedger
from cs2coach.core.utils import safe_divide, side_name
from cs2coach.domains.rounds import RoundWindow, segment_rounds
from cs2coach.domains.windows import EventIndex, WindowDirection

logger = logging.getLogger(__name__)

PLAYING_TEAMS = (Team.TERRORIST, Team.CT)


class ClutchResult(Enum):
    """Result of a clutch situation."""

    WON = "won"
    LOST = "lost"
    UNRESOLVED = "unresolved"  # Round has no RoundEnd


@dataclass
class TradeKill:
    """A death avenged by a kill on the original killer."""

    original_death: Event
    trade: Event

    @property
    def delta_ticks(self) -> float:
        return self.trade.tick - self.original_death.tick

    @property
    def traded_player_id(self) -> int:
        """The player whose death was avenged."""
        return self.original_death.data.victim.player_id

    @property
    def trader_id(self) -> int:
        return self.trade.data.killer.player_id


@dataclass
class OpeningDuel:
    """First kill of a round."""

    round_number: int
    tick: float
    winner_id: int
    loser_id: int
    weapon: str
    headshot: bool


@dataclass
class ClutchSituation:
    """A player left alone against at least one living opponent."""

    round_number: int
    start_tick: float
    clutcher_id: int
    clutcher_team: int
    enemies_alive: int
    result: ClutchResult

    @property
    def scenario(self) -> str:
        return f"1v{self.enemies_alive}"


@dataclass
class PlayerCombatStats:
    """Combat statistics for a single player."""

    player_id: int

    trade_kills: int = 0  # Kills that avenged someone else's death
    traded_deaths: int = 0  # Deaths that were avenged

    opening_kills: int = 0
    opening_deaths: int = 0

    clutch_attempts: int = 0  # Resolved rounds only
    clutch_wins: int = 0

    @property
    def opening_duel_win_rate(self) -> float:
        return safe_divide(self.opening_kills, self.opening_kills + self.opening_deaths)

    @property
    def clutch_success_rate(self) -> float:
        return safe_divide(self.clutch_wins, self.clutch_attempts)


@dataclass
class CombatAnalysisResult:
    """Complete combat analysis for a match."""

    trade_kills: list[TradeKill] = field(default_factory=list)
    opening_duels: list[OpeningDuel] = field(default_factory=list)
    clutch_situations: list[ClutchSituation] = field(default_factory=list)
    player_stats: dict[int, PlayerCombatStats] = field(default_factory=dict)

    def stats_for(self, player_id: int) -> PlayerCombatStats:
        """Stats for a player; all zero when the player had no combat events."""
        return self.player_stats.get(player_id) or PlayerCombatStats(player_id=player_id)


def _pid(participant: Participant | None) -> int | None:
    return participant.player_id if participant is not None else None


def _known_team(team: int) -> int | None:
    return team if team in PLAYING_TEAMS else None


def is_suicide(data: PlayerDeath) -> bool:
    return _pid(data.killer) == _pid(data.victim)


# =============================================================================
# Trade kills
# =============================================================================


def find_trade_kills(index: EventIndex, window_ticks: int) -> list[TradeKill]:
    """
    Pair every death with the kills that avenged it.

    Death B trades death A when A's killer is B's victim, A comes strictly
    before B and ``B.tick - A.tick <= window_ticks``. Suicides neither trade
    nor get traded.
    """
    trades: list[TradeKill] = []
    for avenging in index.events_of_type(EventType.PLAYER_DEATH):
        data = avenging.data
        if is_suicide(data):
            continue
        victim_id = _pid(data.victim)
        killer_id = _pid(data.killer)

        def avenges(candidate: Event, victim_id=victim_id, killer_id=killer_id) -> bool:
            original = candidate.data
            return (
                not is_suicide(original)
                and _pid(original.killer) == victim_id
                and _pid(original.victim) != killer_id
            )

        for original in index.find_in_window(
            EventType.PLAYER_DEATH, avenging, window_ticks, WindowDirection.BEFORE, avenges
        ):
            trades.append(TradeKill(original_death=original, trade=avenging))

    return trades


# =============================================================================
# Clutches
# =============================================================================


class _RoundTeams:
    """
    Team attribution for one round, replayed in event order.

    A participant's team is the team recorded at their most recent death
    event appearance (as killer or victim). Before any such appearance it
    falls back to the latest PlayerSpawn/PlayerTeam team, then to the team
    carried by their latest participant reference in any other event.
    """

    def __init__(self) -> None:
        self.from_deaths: dict[int, int] = {}
        self.from_spawns: dict[int, int] = {}
        self.from_references: dict[int, int] = {}
        self.roster: set[int] = set()

    def observe(self, event: Event) -> None:
        data = event.data
        if isinstance(data, PlayerDeath):
            for participant in (data.killer, data.victim):
                team = _known_team(participant.team)
                self.roster.add(participant.player_id)
                if team is not None:
                    self.from_deaths[participant.player_id] = team
        elif isinstance(data, (PlayerSpawn, PlayerTeam)):
            team = _known_team(data.team)
            if isinstance(data, PlayerSpawn):
                self.roster.add(data.player.player_id)
            if team is not None:
                self.from_spawns[data.player.player_id] = team
        else:
            for name in ("player", "attacker", "victim", "thrower"):
                participant = getattr(data, name, None)
                if isinstance(participant, Participant):
                    team = _known_team(participant.team)
                    if team is not None:
                        self.from_references[participant.player_id] = team

    def team_of(self, player_id: int) -> int | None:
        for source in (self.from_deaths, self.from_spawns, self.from_references):
            if player_id in source:
                return source[player_id]
        return None


def detect_clutch(window: RoundWindow, player_id: int) -> ClutchSituation | None:
    """
    Find the moment a player was left alone in a round.

    The round's deaths up to its RoundEnd are replayed in order. A clutch
    begins at the first death after which the player is alive, every known
    teammate (at least one) is dead, and at least one known opponent is
    alive. Participants with no known team are left out of the alive counts.
    Kills after the round is decided never start a clutch.

    Returns:
        The clutch situation, or None if the player never ended up alone
    """
    teams = _RoundTeams()
    dead: set[int] = set()
    end_key = window.end_event.order_key if window.is_resolved else None

    for event in window.events:
        if end_key is not None and event.order_key >= end_key:
            break
        teams.observe(event)
        if not isinstance(event.data, PlayerDeath):
            continue
        dead.add(event.data.victim.player_id)

        if player_id in dead:
            return None
        my_team = teams.team_of(player_id)
        if my_team is None:
            continue

        teammates = set()
        opponents_alive = set()
        for other in teams.roster - {player_id}:
            team = teams.team_of(other)
            if team == my_team:
                teammates.add(other)
            elif team is not None and other not in dead:
                opponents_alive.add(other)

        if teammates and teammates <= dead and opponents_alive:
            situation = ClutchSituation(
                round_number=window.number,
                start_tick=event.tick,
                clutcher_id=player_id,
                clutcher_team=my_team,
                enemies_alive=len(opponents_alive),
                result=_clutch_result(window, player_id, my_team),
            )
            logger.debug(
                f"Clutch: player {player_id} ({side_name(my_team)}) {situation.scenario} "
                f"in round {window.number} - {situation.result.value}"
            )
            return situation

    return None


def _clutch_result(window: RoundWindow, player_id: int, team: int) -> ClutchResult:
    if not window.is_resolved:
        return ClutchResult.UNRESOLVED
    end_key = window.end_event.order_key
    died = any(
        e.data.victim.player_id == player_id and e.order_key < end_key for e in window.deaths()
    )
    if window.winner == team and not died:
        return ClutchResult.WON
    return ClutchResult.LOST


def is_clutch_situation(window: RoundWindow, player_id: int) -> bool:
    """True if the player faced a clutch in this round."""
    return detect_clutch(window, player_id) is not None


def did_win_clutch(window: RoundWindow, player_id: int) -> bool:
    """True if the player faced a clutch in this round and won it."""
    situation = detect_clutch(window, player_id)
    return situation is not None and situation.result == ClutchResult.WON


# =============================================================================
# Analyzer
# =============================================================================


class CombatAnalyzer:
    """Analyzer for combat metrics from a finalized match ledger."""

    def __init__(
        self,
        ledger: MatchLedger,
        config: AnalysisConfig | None = None,
        index: EventIndex | None = None,
        rounds: list[RoundWindow] | None = None,
    ):
        """
        Initialize the combat analyzer.

        Args:
            ledger: Finalized match to analyze
            config: Analysis thresholds (defaults to the global config)
            index: Prebuilt event index, shared with other analyzers
            rounds: Prebuilt round windows, shared with other analyzers
        """
        self.ledger = ledger
        self.config = config or get_config().analysis
        self.index = index if index is not None else EventIndex(ledger.events)
        self.rounds = rounds if rounds is not None else segment_rounds(ledger.events)

        self._stats: dict[int, PlayerCombatStats] = {}

    def _player(self, player_id: int) -> PlayerCombatStats:
        stats = self._stats.get(player_id)
        if stats is None:
            stats = PlayerCombatStats(player_id=player_id)
            self._stats[player_id] = stats
        return stats

    def analyze(self) -> CombatAnalysisResult:
        """
        Run full combat analysis on the ledger.

        Returns:
            CombatAnalysisResult containing all combat metrics.
        """
        self._stats = {}

        trades = self._analyze_trades()
        openings = self._analyze_opening_duels()
        clutches = self._analyze_clutches()

        logger.info(
            f"Combat analysis complete. {len(trades)} trades, "
            f"{len(openings)} opening duels, {len(clutches)} clutches"
        )
        return CombatAnalysisResult(
            trade_kills=trades,
            opening_duels=openings,
            clutch_situations=clutches,
            player_stats=dict(self._stats),
        )

    def _analyze_trades(self) -> list[TradeKill]:
        trades = find_trade_kills(self.index, self.config.trade_window_ticks)

        # One death can be avenged (and one kill can avenge) more than once
        counted_kills: set[str] = set()
        counted_deaths: set[str] = set()
        for trade in trades:
            if trade.trade.id not in counted_kills:
                counted_kills.add(trade.trade.id)
                self._player(trade.trader_id).trade_kills += 1
            if trade.original_death.id not in counted_deaths:
                counted_deaths.add(trade.original_death.id)
                self._player(trade.traded_player_id).traded_deaths += 1
        return trades

    def _analyze_opening_duels(self) -> list[OpeningDuel]:
        """Detect the first kill of each round."""
        openings: list[OpeningDuel] = []
        for window in self.rounds:
            first = next((e for e in window.deaths() if not is_suicide(e.data)), None)
            if first is None:
                continue
            data = first.data
            opening = OpeningDuel(
                round_number=window.number,
                tick=first.tick,
                winner_id=data.killer.player_id,
                loser_id=data.victim.player_id,
                weapon=data.weapon,
                headshot=data.headshot,
            )
            self._player(opening.winner_id).opening_kills += 1
            self._player(opening.loser_id).opening_deaths += 1
            openings.append(opening)
        return openings

    def _analyze_clutches(self) -> list[ClutchSituation]:
        """Detect clutch situations (1vX) for every player in every round."""
        situations: list[ClutchSituation] = []
        for window in self.rounds:
            for player_id in self.ledger.players:
                situation = detect_clutch(window, player_id)
                if situation is None:
                    continue
                situations.append(situation)
                if situation.result == ClutchResult.UNRESOLVED:
                    continue
                stats = self._player(player_id)
                stats.clutch_attempts += 1
                if situation.result == ClutchResult.WON:
                    stats.clutch_wins += 1
        return situations


def analyze_combat(
    ledger: MatchLedger, config: AnalysisConfig | None = None
) -> CombatAnalysisResult:
    """
    Convenience function to analyze combat from a match ledger.

    Args:
        ledger: Finalized match to analyze
        config: Analysis thresholds

    Returns:
        CombatAnalysisResult containing all combat metrics.
    """
    return CombatAnalyzer(ledger, config).analyze()
