"""
cs2coach Analysis - Performance rating and trainer features.

This module contains:
- rating: Composite 0-100 performance score and metric map
- features: Feature vectors for the regression trainer
"""

from cs2coach.analysis.rating import (
    PerformanceRatingResult,
    PerformanceScorer,
    get_rating_tier,
    metrics,
    rate,
    score,
)

__all__: list[str] = [
    "PerformanceRatingResult",
    "PerformanceScorer",
    "get_rating_tier",
    "metrics",
    "rate",
    "score",
]
