"""
Economy Analysis Module for cs2coach

Estimates what each player carried into every round:
- Inventory replay from item pickup/equip/drop events
- Equipment value at the end of the buy phase
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

from cs2coach.core.config import AnalysisConfig, get_config
from cs2coach.core.events import Event, ItemDrop, ItemEquip, ItemPickup, PlayerDeath
from cs2coach.core.models import MatchLedger
from cs2coach.core.utils import estimate_item_cost, normalize_weapon_name
from cs2coach.domains.rounds import RoundWindow, segment_rounds

logger = logging.getLogger(__name__)


@dataclass
class EquipmentSample:
    """A player's inventory value at one round's buy cutoff."""

    round_number: int
    cutoff_tick: float
    equipment_value: int
    items: list[str] = field(default_factory=list)


class Inventory:
    """Items one player is carrying, replayed from the event stream."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        self.items: Counter[str] = Counter()

    def apply(self, event: Event) -> bool:
        """
        Update the inventory from one event.

        Returns:
            True when the event is an item event for this player
        """
        data = event.data
        if isinstance(data, PlayerDeath):
            if data.victim.player_id == self.player_id:
                self.items.clear()
            return False

        if not isinstance(data, (ItemPickup, ItemEquip, ItemDrop)):
            return False
        if data.player.player_id != self.player_id:
            return False

        item = normalize_weapon_name(data.item)
        if not item:
            return True
        if isinstance(data, ItemPickup):
            self.items[item] += 1
        elif isinstance(data, ItemEquip):
            # Equipping something already carried is a weapon switch
            if self.items[item] == 0:
                self.items[item] = 1
        elif self.items[item] > 0:
            self.items[item] -= 1
            if self.items[item] == 0:
                del self.items[item]
        return True

    @property
    def value(self) -> int:
        return sum(estimate_item_cost(item) * count for item, count in self.items.items())

    def snapshot(self) -> list[str]:
        return sorted(self.items.elements())


class EconomyAnalyzer:
    """Estimates per-round equipment value for players in a finalized match."""

    def __init__(
        self,
        ledger: MatchLedger,
        config: AnalysisConfig | None = None,
        rounds: list[RoundWindow] | None = None,
    ):
        self.ledger = ledger
        self.config = config or get_config().analysis
        self.rounds = rounds if rounds is not None else segment_rounds(ledger.events)

    def buy_cutoff(self, window: RoundWindow) -> float:
        """Tick at which the buy phase of a round ends."""
        return window.start_tick + self.config.buy_time_seconds * self.ledger.tick_rate

    def equipment_samples(self, player_id: int) -> list[EquipmentSample]:
        """
        Replay a player's inventory and sample it at every buy cutoff.

        A round yields a sample only when the player had an item event
        between the round start and the cutoff. The inventory carries over
        between rounds and is emptied when the player dies.
        """
        inventory = Inventory(player_id)
        samples: list[EquipmentSample] = []

        first_round_key = self.rounds[0].start_event.order_key if self.rounds else None
        for event in self.ledger.events:
            if first_round_key is not None and event.order_key >= first_round_key:
                break
            inventory.apply(event)

        for window in self.rounds:
            cutoff = self.buy_cutoff(window)
            bought = False
            value: int | None = None
            items: list[str] = []

            for event in window.events:
                if value is None and event.tick > cutoff:
                    value, items = inventory.value, inventory.snapshot()
                if inventory.apply(event) and event.tick <= cutoff:
                    bought = True

            if value is None:
                value, items = inventory.value, inventory.snapshot()
            if bought:
                samples.append(
                    EquipmentSample(
                        round_number=window.number,
                        cutoff_tick=cutoff,
                        equipment_value=value,
                        items=items,
                    )
                )

        logger.debug(f"Player {player_id}: {len(samples)} equipment samples")
        return samples

    def average_equipment_value(self, player_id: int) -> float | None:
        """Mean equipment value over sampled rounds; None without buy data."""
        samples = self.equipment_samples(player_id)
        if not samples:
            return None
        return sum(s.equipment_value for s in samples) / len(samples)
