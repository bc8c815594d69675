"""Tests for round segmentation."""

from cs2coach.core.constants import EventType, Team
from cs2coach.domains.rounds import count_rounds, round_for_tick, segment_rounds


class TestSegmentRounds:
    """Tests for splitting the ledger into rounds."""

    def test_two_rounds(self, builder):
        alice = builder.player("alice", team=Team.CT)
        bob = builder.player("bob", team=Team.TERRORIST)
        builder.round_start(100)
        builder.kill(500, alice, bob)
        builder.round_end(600, Team.CT)
        builder.round_start(700)
        builder.kill(900, bob, alice)
        builder.round_end(1000, Team.TERRORIST)
        ledger = builder.parse()

        rounds = segment_rounds(ledger.events)

        assert [r.number for r in rounds] == [1, 2]
        assert [r.start_tick for r in rounds] == [100, 700]
        assert [r.winner for r in rounds] == [Team.CT, Team.TERRORIST]
        assert all(r.is_resolved for r in rounds)
        assert len(rounds[0].deaths()) == 1

    def test_events_before_first_round_are_excluded(self, builder):
        """Warmup and server info belong to no round."""
        alice = builder.player("alice")
        bob = builder.player("bob", team=Team.TERRORIST)
        builder.kill(10, alice, bob)
        builder.round_start(100)
        ledger = builder.parse()

        rounds = segment_rounds(ledger.events)

        assert len(rounds) == 1
        assert rounds[0].events[0].type == EventType.ROUND_START
        assert rounds[0].deaths() == []

    def test_truncated_round_is_unresolved(self, builder):
        alice = builder.player("alice")
        bob = builder.player("bob", team=Team.TERRORIST)
        builder.round_start(100)
        builder.kill(300, alice, bob)
        ledger = builder.parse()

        (window,) = segment_rounds(ledger.events)

        assert not window.is_resolved
        assert window.winner is None
        assert window.end_tick == 300

    def test_first_round_end_is_attached(self, builder):
        builder.round_start(100)
        builder.round_end(200, Team.CT)
        builder.round_end(210, Team.TERRORIST)
        ledger = builder.parse()

        (window,) = segment_rounds(ledger.events)

        assert window.winner == Team.CT
        assert len(window.of_type(EventType.ROUND_END)) == 2

    def test_no_rounds(self, builder):
        ledger = builder.parse()
        assert segment_rounds(ledger.events) == []


class TestRoundHelpers:
    """Tests for round counting and lookup."""

    def test_count_rounds_is_never_zero(self, builder):
        ledger = builder.parse()
        assert count_rounds(ledger.events) == 1

    def test_count_rounds(self, builder):
        for tick in (100, 200, 300):
            builder.round_start(tick)
        ledger = builder.parse()
        assert count_rounds(ledger.events) == 3

    def test_round_for_tick(self, builder):
        builder.round_start(100)
        builder.round_start(500)
        ledger = builder.parse()
        rounds = segment_rounds(ledger.events)

        assert round_for_tick(rounds, 50) is None
        assert round_for_tick(rounds, 100).number == 1
        assert round_for_tick(rounds, 499).number == 1
        assert round_for_tick(rounds, 800).number == 2
