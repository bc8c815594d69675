"""
Training Record Store - rated matches kept on disk for the regression trainer.

Each rated match is written as ``match_<UTC timestamp>.json`` holding the
match's decoded events, the rated player and the rating breakdown. Stored
events use the same representation as the JSON-lines event stream, so a
record can be re-parsed into a MatchLedger later.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from cs2coach.analysis.features import build_feature_frame, build_features
from cs2coach.analysis.rating import PerformanceRatingResult
from cs2coach.core.config import AnalysisConfig, CoachConfig, get_config
from cs2coach.core.errors import CoachError
from cs2coach.core.models import MatchLedger
from cs2coach.core.session import parse
from cs2coach.core.stream import event_from_dict, event_to_dict

logger = logging.getLogger(__name__)

RECORD_PATTERN = "match_*.json"


@dataclass
class TrainingRecord:
    """One rated match as stored on disk."""

    player_name: str
    player_id: int
    performance_rating: float
    map_name: str
    timestamp: str  # ISO 8601, UTC
    detailed_metrics: dict[str, float] = field(default_factory=dict)
    events: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_name": self.player_name,
            "player_id": self.player_id,
            "performance_rating": self.performance_rating,
            "map_name": self.map_name,
            "timestamp": self.timestamp,
            "detailed_metrics": dict(self.detailed_metrics),
            "events": list(self.events),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrainingRecord:
        return cls(
            player_name=data["player_name"],
            player_id=int(data["player_id"]),
            performance_rating=float(data["performance_rating"]),
            map_name=data.get("map_name", ""),
            timestamp=data.get("timestamp", ""),
            detailed_metrics=data.get("detailed_metrics", {}),
            events=data.get("events", []),
        )

    def rebuild_ledger(self, config: AnalysisConfig | None = None) -> MatchLedger:
        """Re-parse the stored events."""
        return parse((event_from_dict(record) for record in self.events), config)


class TrainingStore:
    """Directory of training records."""

    def __init__(self, directory: str | Path | None = None, config: CoachConfig | None = None):
        self.config = config or get_config()
        self.directory = Path(directory or self.config.training.data_directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _new_path(self, now: datetime) -> Path:
        stem = f"match_{now.strftime('%Y%m%d_%H%M%S')}"
        path = self.directory / f"{stem}.json"
        counter = 1
        while path.exists():
            path = self.directory / f"{stem}_{counter}.json"
            counter += 1
        return path

    def save(self, ledger: MatchLedger, result: PerformanceRatingResult) -> Path:
        """
        Store a rated match.

        Args:
            ledger: The match the rating was computed from
            result: Rating of the player being tracked

        Returns:
            Path of the written record
        """
        now = datetime.now(timezone.utc)
        record = TrainingRecord(
            player_name=result.player_name,
            player_id=result.player_id,
            performance_rating=result.score,
            map_name=ledger.map_name,
            timestamp=now.isoformat(),
            detailed_metrics=dict(result.metrics),
            events=[event_to_dict(event) for event in ledger.events],
        )

        path = self._new_path(now)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record.to_dict(), f, indent=self.config.training.json_indent)

        logger.info(f"Saved training record for {result.player_name} to {path}")
        return path

    def record_paths(self) -> list[Path]:
        return sorted(self.directory.glob(RECORD_PATTERN))

    def load_all(self) -> list[TrainingRecord]:
        """Load every record in the directory; unreadable files are skipped."""
        records: list[TrainingRecord] = []
        for path in self.record_paths():
            try:
                with open(path, encoding="utf-8") as f:
                    records.append(TrainingRecord.from_dict(json.load(f)))
            except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable training record {path.name}: {e}")
        return records

    def prepare_training_frame(self) -> pd.DataFrame:
        """
        Build the trainer's feature frame from every stored record.

        Each record's events are re-parsed; the stored rating replaces the
        recomputed performance score as the label.
        """
        rows = []
        for record in self.load_all():
            try:
                ledger = record.rebuild_ledger(self.config.analysis)
                player = ledger.get_player(record.player_id)
            except CoachError as e:
                logger.warning(f"Skipping record for {record.player_name}: {e}")
                continue

            features = build_features(ledger, player.stable_id, self.config)
            features.performance_score = record.performance_rating
            rows.append(features)

        logger.info(f"Prepared {len(rows)} training rows from {self.directory}")
        return build_feature_frame(rows)
