"""
cs2coach Pipeline - Persistence of rated matches.

This module handles:
- Writing rated matches as training records
- Rebuilding trainer feature frames from stored records
"""

from cs2coach.pipeline.training_store import TrainingRecord, TrainingStore

__all__ = ["TrainingRecord", "TrainingStore"]
