"""
cs2coach Core - Foundation modules for event ingestion.

This module contains the fundamental components:
- constants: Game constants, enums, and rating tables
- config: Application configuration management
- errors: Exception hierarchy
- events: Decoded event vocabulary
- ledger: Append-only ordered event ledger
- models: Player and match records
- stream: Decoded event stream readers
- session: Parse session driving stream -> MatchLedger
"""

from cs2coach.core.constants import (
    CS2_TICK_RATE,
    FLASH_ASSIST_MIN_DURATION,
    FLASH_ASSIST_WINDOW_TICKS,
    TRADE_WINDOW_TICKS,
    EventType,
    Team,
)
from cs2coach.core.errors import (
    CoachError,
    EventStreamError,
    LedgerOrderError,
    PlayerNotFoundError,
    ReconciliationError,
)
from cs2coach.core.events import DecodedEvent, Event, Participant
from cs2coach.core.ledger import EventLedger
from cs2coach.core.models import MatchLedger, PlayerFragment, PlayerRecord, WeaponRecord

__all__ = [
    # Constants
    "CS2_TICK_RATE",
    "FLASH_ASSIST_MIN_DURATION",
    "FLASH_ASSIST_WINDOW_TICKS",
    "TRADE_WINDOW_TICKS",
    "EventType",
    "Team",
    # Errors
    "CoachError",
    "EventStreamError",
    "LedgerOrderError",
    "PlayerNotFoundError",
    "ReconciliationError",
    # Events and records
    "DecodedEvent",
    "Event",
    "Participant",
    "EventLedger",
    "MatchLedger",
    "PlayerFragment",
    "PlayerRecord",
    "WeaponRecord",
]
