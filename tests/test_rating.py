"""Tests for the 0-100 performance rating."""

import math

import pytest

from cs2coach.analysis.rating import (
    PerformanceScorer,
    get_rating_tier,
    metrics,
    rate,
    score,
)
from cs2coach.core.config import CoachConfig, ScoringConfig
from cs2coach.core.constants import Team
from cs2coach.core.errors import PlayerNotFoundError

METRIC_KEYS = {
    "kdr",
    "kills_per_round",
    "deaths_per_round",
    "survival_rate",
    "headshot_fraction",
    "opening_duel_win_rate",
    "clutch_success_rate",
    "clutch_attempts",
    "clutch_wins",
    "trade_effectiveness",
    "traded_deaths",
    "trade_kills",
    "flash_assists",
    "flash_assists_per_round",
    "utility_damage",
    "utility_damage_per_round",
    "support_score",
    "average_accuracy",
    "average_equipment_value",
    "economy_samples",
}


@pytest.fixture
def players(builder):
    alice = builder.player("alice", team=Team.CT)
    bob = builder.player("bob", team=Team.TERRORIST)
    return alice, bob


class TestScore:
    """Tests for the composite score."""

    def test_single_headshot_kill(self, builder, players):
        """kdr 1 -> 5, kpr 1 -> 11.25, headshots -> 10, opening -> 10, neutral economy 7.5."""
        alice, bob = players
        builder.round_start(100)
        builder.kill(200, alice, bob, headshot=True)
        ledger = builder.parse()

        result = rate(ledger, alice.steam_id)

        assert result.combat == pytest.approx(26.25)
        assert result.impact == pytest.approx(10.0)
        assert result.utility == pytest.approx(0.0)
        assert result.economy == pytest.approx(7.5)
        assert result.score == pytest.approx(43.75)
        assert result.tier == "Average"

    def test_player_without_kills_or_deaths(self, builder, players):
        """A 0/0 player scores only the neutral economy points."""
        alice, bob = players
        builder.round_start(100)
        builder.spawn(101, alice, bob)
        ledger = builder.parse()

        value = score(ledger, alice.steam_id)

        assert value == pytest.approx(7.5)
        assert metrics(ledger, alice.steam_id)["kdr"] == 0.0

    def test_neutral_economy_from_config(self, builder, players):
        alice, bob = players
        builder.spawn(101, alice, bob)
        ledger = builder.parse()
        config = CoachConfig(scoring=ScoringConfig(neutral_economy_points=0.0))

        assert score(ledger, alice.steam_id, config) == pytest.approx(0.0)

    def test_economy_from_buy_samples(self, builder, players):
        """3700 equipment over the 2000-4500 range is 68% of 15 points."""
        alice, bob = players
        builder.round_start(100)
        builder.pickup(200, alice, "ak47")
        builder.pickup(210, alice, "vesthelm")
        ledger = builder.parse()

        result = rate(ledger, alice.steam_id)

        assert result.metrics["average_equipment_value"] == pytest.approx(3700)
        assert result.economy == pytest.approx(10.2)

    def test_score_is_bounded(self, builder, players):
        alice, bob = players
        for i in range(5):
            start = 100 + i * 3000
            builder.round_start(start)
            builder.pickup(start + 10, alice, "awp")
            builder.pickup(start + 11, alice, "vesthelm")
            builder.blind(start + 400, alice, bob, 3.0)
            builder.hurt(start + 410, alice, bob, 60, weapon="hegrenade")
            builder.kill(start + 420, alice, bob, headshot=True)
            builder.round_end(start + 500, Team.CT)
        ledger = builder.parse()

        for player in (alice, bob):
            value = score(ledger, player.steam_id)
            assert math.isfinite(value)
            assert 0.0 <= value <= 100.0
        assert score(ledger, alice.steam_id) > score(ledger, bob.steam_id)

    def test_match_without_rounds(self, builder, players):
        """No RoundStart events: the round count falls back to 1."""
        alice, bob = players
        builder.kill(200, alice, bob)
        builder.kill(300, bob, alice)
        ledger = builder.parse()

        result = rate(ledger, alice.steam_id)

        assert math.isfinite(result.score)
        assert result.metrics["kills_per_round"] == pytest.approx(1.0)
        assert result.metrics["survival_rate"] == pytest.approx(0.0)

    def test_unknown_player_raises(self, builder, players):
        builder.kill(200, *players)
        ledger = builder.parse()

        with pytest.raises(PlayerNotFoundError):
            score(ledger, 42)


class TestMetrics:
    """Tests for the named metric map."""

    def test_all_metrics_present(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.kill(200, alice, bob)
        ledger = builder.parse()

        assert set(metrics(ledger, alice.steam_id)) == METRIC_KEYS

    def test_metrics_are_idempotent(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.fire(150, alice)
        builder.hurt(151, alice, bob, 27)
        builder.kill(200, alice, bob)
        ledger = builder.parse()
        scorer = PerformanceScorer(ledger)

        first = scorer.metrics(alice.steam_id)
        second = scorer.metrics(alice.steam_id)

        assert first == second
        assert PerformanceScorer(ledger).metrics(alice.steam_id) == first

    def test_average_accuracy(self, builder, players):
        """Mean of per-weapon accuracy: ak47 1/2 and deagle 1/1 give 0.75."""
        alice, bob = players
        builder.round_start(100)
        builder.fire(150, alice, "ak47")
        builder.fire(151, alice, "ak47")
        builder.hurt(152, alice, bob, 27, weapon="ak47")
        builder.fire(160, alice, "deagle")
        builder.hurt(161, alice, bob, 40, weapon="deagle")
        ledger = builder.parse()

        assert metrics(ledger, alice.steam_id)["average_accuracy"] == pytest.approx(0.75)

    def test_trade_effectiveness_per_death(self, builder, players):
        """One non-trade kill and one avenged death: every opportunity was traded."""
        alice, bob = players
        carol = builder.player("carol", team=Team.CT)
        dave = builder.player("dave", team=Team.TERRORIST)
        builder.round_start(100)
        builder.kill(200, alice, bob)
        builder.kill(300, dave, alice)
        builder.kill(350, carol, dave)
        ledger = builder.parse()

        result = metrics(ledger, alice.steam_id)

        assert (result["traded_deaths"], result["trade_kills"]) == (1.0, 0.0)
        assert result["trade_effectiveness"] == pytest.approx(1.0)

    def test_trade_effectiveness_without_deaths(self, builder, players):
        alice, bob = players
        builder.round_start(100)
        builder.kill(200, alice, bob)
        ledger = builder.parse()

        assert metrics(ledger, alice.steam_id)["trade_effectiveness"] == 0.0

    def test_kdr_without_deaths_is_kill_count(self, builder, players):
        alice, bob = players
        dave = builder.player("dave", team=Team.TERRORIST)
        builder.round_start(100)
        builder.kill(200, alice, bob)
        builder.kill(300, alice, dave)
        ledger = builder.parse()

        assert metrics(ledger, alice.steam_id)["kdr"] == pytest.approx(2.0)


class TestRatingTier:
    @pytest.mark.parametrize(
        "value,tier",
        [
            (100, "Exceptional"),
            (85, "Exceptional"),
            (70, "Excellent"),
            (55, "Good"),
            (40, "Average"),
            (25, "Below Average"),
            (24.9, "Poor"),
            (0, "Poor"),
        ],
    )
    def test_tiers(self, value, tier):
        assert get_rating_tier(value) == tier

    def test_to_dict(self, builder, players):
        alice, bob = players
        builder.kill(200, alice, bob)
        ledger = builder.parse()

        data = rate(ledger, alice.steam_id).to_dict()

        assert data["player_name"] == "alice"
        assert data["tier"] == get_rating_tier(data["score"])
        assert set(data["metrics"]) == METRIC_KEYS
