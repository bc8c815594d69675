"""Tests for the economy analysis module."""

import pytest

from cs2coach.core.config import AnalysisConfig
from cs2coach.core.constants import Team
from cs2coach.domains.economy import EconomyAnalyzer


@pytest.fixture
def players(builder):
    alice = builder.player("alice", team=Team.CT)
    bob = builder.player("bob", team=Team.TERRORIST)
    return alice, bob


class TestEquipmentSamples:
    """Tests for inventory replay at the buy cutoff (64 tick, 20s buy time)."""

    def test_cutoff_tick(self, builder, players):
        builder.round_start(100)
        ledger = builder.parse()
        analyzer = EconomyAnalyzer(ledger)

        assert analyzer.buy_cutoff(analyzer.rounds[0]) == pytest.approx(100 + 20 * 64)

    def test_buys_before_cutoff(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "weapon_ak47")
        builder.pickup(210, alice, "vesthelm")
        builder.fire(2000, alice)
        ledger = builder.parse()

        (sample,) = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert sample.round_number == 1
        assert sample.equipment_value == 3700
        assert sample.items == ["ak47", "vesthelm"]

    def test_pickup_after_cutoff_is_ignored(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "deagle")
        builder.pickup(1500, alice, "awp")  # picked up mid-round
        ledger = builder.parse()

        (sample,) = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert sample.equipment_value == 700

    def test_equip_of_carried_item_is_a_switch(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "ak47")
        builder.equip(210, alice, "ak47")
        builder.equip(220, alice, "ak47")
        ledger = builder.parse()

        (sample,) = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert sample.equipment_value == 2700

    def test_drop_removes_item(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "awp")
        builder.pickup(210, alice, "ak47")
        builder.drop(220, alice, "awp")
        ledger = builder.parse()

        (sample,) = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert sample.items == ["ak47"]

    def test_inventory_carries_over_until_death(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "ak47")
        builder.round_end(2000, Team.CT)
        builder.round_start(3000)
        builder.pickup(3100, alice, "vesthelm")
        builder.kill(4500, bob, alice)  # after the buy cutoff
        builder.round_end(5000, Team.TERRORIST)
        builder.round_start(6000)
        builder.pickup(6100, alice, "deagle")
        ledger = builder.parse()

        samples = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert [s.round_number for s in samples] == [1, 2, 3]
        assert [s.equipment_value for s in samples] == [2700, 3700, 700]

    def test_round_without_item_events_is_skipped(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "ak47")
        builder.round_start(3000)
        builder.fire(3100, alice)
        ledger = builder.parse()

        samples = EconomyAnalyzer(ledger).equipment_samples(alice.steam_id)

        assert [s.round_number for s in samples] == [1]

    def test_other_players_items_do_not_count(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, bob, "awp")
        ledger = builder.parse()

        assert EconomyAnalyzer(ledger).equipment_samples(alice.steam_id) == []

    def test_buy_time_from_config(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(800, alice, "ak47")
        ledger = builder.parse()

        short = EconomyAnalyzer(ledger, AnalysisConfig(buy_time_seconds=10.0))
        assert short.equipment_samples(alice.steam_id) == []


class TestAverageEquipmentValue:
    def test_average(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "deagle")
        builder.round_start(3000)
        builder.pickup(3100, alice, "vesthelm")
        ledger = builder.parse()

        assert EconomyAnalyzer(ledger).average_equipment_value(alice.steam_id) == pytest.approx(
            (700 + 1700) / 2
        )

    def test_no_buy_data(self, builder, players):
        builder.round_start(100)
        ledger = builder.parse()
        assert EconomyAnalyzer(ledger).average_equipment_value(players[0].steam_id) is None
