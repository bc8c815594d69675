"""
cs2coach - CS2 Match Performance Ratings

Turns a chronological stream of decoded Counter-Strike 2 game events into
per-player statistics and a 0-100 performance rating, with trade kill,
clutch and flash assist detection.

Usage:
    from cs2coach import JsonlEventStream, parse, rate

    with JsonlEventStream("match.jsonl") as stream:
        ledger = parse(stream)

    for player_id, player in ledger.players.items():
        result = rate(ledger, player_id)
        print(f"{player.display_name}: {result.score:.1f} ({result.tier})")
"""

__version__ = "0.1.0"
__author__ = "cs2coach Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    if name == "parse":
        from cs2coach.core.session import parse
        return parse
    elif name == "ParseSession":
        from cs2coach.core.session import ParseSession
        return ParseSession
    elif name == "MatchLedger":
        from cs2coach.core.models import MatchLedger
        return MatchLedger
    elif name == "JsonlEventStream":
        from cs2coach.core.stream import JsonlEventStream
        return JsonlEventStream
    elif name == "score":
        from cs2coach.analysis.rating import score
        return score
    elif name == "metrics":
        from cs2coach.analysis.rating import metrics
        return metrics
    elif name == "rate":
        from cs2coach.analysis.rating import rate
        return rate
    elif name == "PerformanceScorer":
        from cs2coach.analysis.rating import PerformanceScorer
        return PerformanceScorer
    elif name == "build_features":
        from cs2coach.analysis.features import build_features
        return build_features
    elif name == "TrainingStore":
        from cs2coach.pipeline.training_store import TrainingStore
        return TrainingStore
    raise AttributeError(f"module 'cs2coach' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Parsing
    "parse",
    "ParseSession",
    "MatchLedger",
    "JsonlEventStream",
    # Rating
    "score",
    "metrics",
    "rate",
    "PerformanceScorer",
    # Training data
    "build_features",
    "TrainingStore",
]
