"""
Feature vectors for the external regression trainer.

One MatchFeatures row describes one player's match. Rows are collected into
a pandas DataFrame whose columns match what the trainer consumes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

import pandas as pd

from cs2coach.analysis.rating import PerformanceScorer
from cs2coach.core.config import CoachConfig
from cs2coach.core.constants import RATING_WEIGHTS
from cs2coach.core.models import MatchLedger

logger = logging.getLogger(__name__)

UTILITY_POINTS = sum(RATING_WEIGHTS[key] for key in ("flash_assist", "utility_damage", "support"))

FEATURE_COLUMNS = [
    "kills_per_round",
    "deaths_per_round",
    "headshot_percentage",
    "accuracy_score",
    "utility_score",
    "map_name",
    "performance_score",
]


@dataclass
class MatchFeatures:
    """Trainer input for one player in one match."""

    kills_per_round: float
    deaths_per_round: float
    headshot_percentage: float  # 0-100
    accuracy_score: float  # 0-100
    utility_score: float  # 0-100
    map_name: str
    performance_score: float  # Label, 0-100

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_features(
    ledger: MatchLedger,
    player_id: int,
    config: CoachConfig | None = None,
    scorer: PerformanceScorer | None = None,
) -> MatchFeatures:
    """
    Build the feature vector for one player.

    Args:
        ledger: Finalized match
        player_id: Stable id of the player
        config: Scoring configuration
        scorer: Existing scorer for this ledger, to reuse its analysis

    Raises:
        PlayerNotFoundError: If the player is not in the match
    """
    scorer = scorer or PerformanceScorer(ledger, config)
    result = scorer.rate(player_id)
    player = ledger.get_player(player_id)

    return MatchFeatures(
        kills_per_round=result.metrics["kills_per_round"],
        deaths_per_round=result.metrics["deaths_per_round"],
        headshot_percentage=player.headshot_percentage,
        accuracy_score=result.metrics["average_accuracy"] * 100,
        utility_score=100.0 * result.utility / UTILITY_POINTS,
        map_name=ledger.map_name,
        performance_score=result.score,
    )


def build_feature_frame(rows: Iterable[MatchFeatures]) -> pd.DataFrame:
    """Collect feature rows into a DataFrame with the trainer's column layout."""
    records = [row.to_dict() for row in rows]
    df = pd.DataFrame(records, columns=FEATURE_COLUMNS)
    logger.debug(f"Built feature frame with {len(df)} rows")
    return df
