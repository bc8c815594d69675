"""
Performance Rating for cs2coach

Combines a player's match statistics and correlation facts into a single
0-100 composite score. Each metric is scaled linearly over a reference
range, clamped to [0, 1], and weighted:

- Combat (40): KDR, kills per round, headshot fraction
- Impact (25): opening duel win rate, clutch success rate, trade effectiveness
- Utility (20): flash assists per round, utility damage per round, support ratio
- Economy (15): average equipment value at the buy cutoff

A player with no buy-phase data gets the configured neutral economy score.
The result is always finite and inside [0, 100], including for players with
no kills, no deaths, or matches without round boundaries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from cs2coach.core.config import CoachConfig, get_config
from cs2coach.core.constants import RATING_RANGES, RATING_WEIGHTS
from cs2coach.core.models import MatchLedger
from cs2coach.core.utils import clamp, safe_divide, scale_value
from cs2coach.domains.combat import CombatAnalysisResult, CombatAnalyzer
from cs2coach.domains.economy import EconomyAnalyzer
from cs2coach.domains.rounds import count_rounds, segment_rounds
from cs2coach.domains.utility import UtilityAnalysisResult, UtilityAnalyzer
from cs2coach.domains.windows import EventIndex

logger = logging.getLogger(__name__)

# metric key -> RATING_WEIGHTS / RATING_RANGES key
COMBAT_COMPONENTS = {
    "kdr": "kdr",
    "kills_per_round": "kpr",
    "headshot_fraction": "headshot",
}
IMPACT_COMPONENTS = {
    "opening_duel_win_rate": "opening",
    "clutch_success_rate": "clutch",
    "trade_effectiveness": "trade",
}
UTILITY_COMPONENTS = {
    "flash_assists_per_round": "flash_assist",
    "utility_damage_per_round": "utility_damage",
    "support_score": "support",
}


@dataclass
class PerformanceRatingResult:
    """Composite rating with its component breakdown."""

    player_id: int
    player_name: str
    score: float
    combat: float
    impact: float
    utility: float
    economy: float
    metrics: dict[str, float] = field(default_factory=dict)

    @property
    def tier(self) -> str:
        return get_rating_tier(self.score)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "score": round(self.score, 2),
            "tier": self.tier,
            "combat": round(self.combat, 2),
            "impact": round(self.impact, 2),
            "utility": round(self.utility, 2),
            "economy": round(self.economy, 2),
            "metrics": dict(self.metrics),
        }


def weighted_component(metrics: dict[str, float], components: dict[str, str]) -> float:
    """Sum the weighted, range-scaled values of a group of metrics."""
    total = 0.0
    for metric_key, rating_key in components.items():
        low, high = RATING_RANGES[rating_key]
        total += RATING_WEIGHTS[rating_key] * scale_value(metrics[metric_key], low, high)
    return total


def get_rating_tier(score: float) -> str:
    """
    Get a descriptive tier for a 0-100 performance score.

    Args:
        score: Composite performance score

    Returns:
        String description of the rating tier
    """
    if score >= 85:
        return "Exceptional"
    if score >= 70:
        return "Excellent"
    if score >= 55:
        return "Good"
    if score >= 40:
        return "Average"
    if score >= 25:
        return "Below Average"
    return "Poor"


class PerformanceScorer:
    """
    Rates players of one finalized match.

    Match-wide analysis (event index, rounds, combat and utility facts) is
    computed once on first use and shared by every player query. All
    queries are pure: calling them again returns identical results.
    """

    def __init__(self, ledger: MatchLedger, config: CoachConfig | None = None):
        self.ledger = ledger
        self.config = config or get_config()
        self._index: EventIndex | None = None
        self._rounds = None
        self._combat: CombatAnalysisResult | None = None
        self._utility: UtilityAnalysisResult | None = None
        self._economy: EconomyAnalyzer | None = None

    def _prepare(self) -> None:
        if self._combat is not None:
            return
        analysis = self.config.analysis
        self._index = EventIndex(self.ledger.events)
        self._rounds = segment_rounds(self.ledger.events)
        self._combat = CombatAnalyzer(self.ledger, analysis, self._index, self._rounds).analyze()
        self._utility = UtilityAnalyzer(self.ledger, analysis, self._index).analyze()
        self._economy = EconomyAnalyzer(self.ledger, analysis, self._rounds)

    def metrics(self, player_id: int) -> dict[str, float]:
        """
        Compute the named metrics for one player.

        Raises:
            PlayerNotFoundError: If the player is not in the match
        """
        player = self.ledger.get_player(player_id)
        self._prepare()

        rounds = count_rounds(self.ledger.events)
        combat = self._combat.stats_for(player_id)
        utility = self._utility.stats_for(player_id)
        samples = self._economy.equipment_samples(player_id)

        kills, deaths = player.kills, player.deaths
        kdr = kills / deaths if deaths > 0 else float(kills)
        trade_involvements = combat.traded_deaths + combat.trade_kills

        return {
            "kdr": kdr,
            "kills_per_round": kills / rounds,
            "deaths_per_round": deaths / rounds,
            "survival_rate": clamp(1.0 - deaths / rounds, 0.0, 1.0),
            "headshot_fraction": safe_divide(player.headshot_count, kills),
            "opening_duel_win_rate": combat.opening_duel_win_rate,
            "clutch_success_rate": combat.clutch_success_rate,
            "clutch_attempts": float(combat.clutch_attempts),
            "clutch_wins": float(combat.clutch_wins),
            "trade_effectiveness": safe_divide(trade_involvements, deaths),
            "traded_deaths": float(combat.traded_deaths),
            "trade_kills": float(combat.trade_kills),
            "flash_assists": float(utility.flash_assists),
            "flash_assists_per_round": utility.flash_assists / rounds,
            "utility_damage": float(utility.utility_damage),
            "utility_damage_per_round": utility.utility_damage / rounds,
            "support_score": player.assists / max(1, kills),
            "average_accuracy": player.average_weapon_accuracy,
            "average_equipment_value": (
                sum(s.equipment_value for s in samples) / len(samples) if samples else 0.0
            ),
            "economy_samples": float(len(samples)),
        }

    def rate(self, player_id: int) -> PerformanceRatingResult:
        """Score a player and return the component breakdown."""
        metrics = self.metrics(player_id)

        combat = weighted_component(metrics, COMBAT_COMPONENTS)
        impact = weighted_component(metrics, IMPACT_COMPONENTS)
        utility = weighted_component(metrics, UTILITY_COMPONENTS)
        if metrics["economy_samples"] > 0:
            low, high = RATING_RANGES["economy"]
            economy = RATING_WEIGHTS["economy"] * scale_value(
                metrics["average_equipment_value"], low, high
            )
        else:
            economy = self.config.scoring.neutral_economy_points

        score = clamp(combat + impact + utility + economy, 0.0, 100.0)
        player = self.ledger.get_player(player_id)
        logger.debug(
            f"{player.display_name}: combat={combat:.1f} impact={impact:.1f} "
            f"utility={utility:.1f} economy={economy:.1f} -> {score:.1f}"
        )
        return PerformanceRatingResult(
            player_id=player_id,
            player_name=player.display_name,
            score=score,
            combat=combat,
            impact=impact,
            utility=utility,
            economy=economy,
            metrics=metrics,
        )

    def score(self, player_id: int) -> float:
        """Composite 0-100 performance score."""
        return self.rate(player_id).score


def score(ledger: MatchLedger, player_id: int, config: CoachConfig | None = None) -> float:
    """Composite 0-100 performance score for one player."""
    return PerformanceScorer(ledger, config).score(player_id)


def metrics(
    ledger: MatchLedger, player_id: int, config: CoachConfig | None = None
) -> dict[str, float]:
    """Named performance metrics for one player."""
    return PerformanceScorer(ledger, config).metrics(player_id)


def rate(
    ledger: MatchLedger, player_id: int, config: CoachConfig | None = None
) -> PerformanceRatingResult:
    """Composite score plus component breakdown for one player."""
    return PerformanceScorer(ledger, config).rate(player_id)
