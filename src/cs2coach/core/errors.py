"""Exceptions raised by the cs2coach engine."""


class CoachError(Exception):
    """Base class for cs2coach errors."""


class EventStreamError(CoachError, ValueError):
    """The decoded event stream is malformed or truncated."""


class LedgerOrderError(CoachError, ValueError):
    """An event was appended with a tick earlier than the ledger's last tick."""


class ReconciliationError(CoachError, ValueError):
    """Player fragments could not be merged into a canonical record."""


class PlayerNotFoundError(CoachError, LookupError):
    """A requested player does not exist in the reconciled player map."""

    def __init__(self, player: object, available: list[str] | None = None):
        self.player = player
        self.available = available or []
        message = f"Player {player!r} not found in match data"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)
