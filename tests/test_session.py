"""Tests for the parse session."""

import pytest

from cs2coach.core.config import AnalysisConfig
from cs2coach.core.constants import Team
from cs2coach.core.errors import LedgerOrderError
from cs2coach.core.events import DecodedEvent, Participant, PlayerDeath, RoundStart, WeaponFire
from cs2coach.core.session import ParseSession, parse


@pytest.fixture
def players(builder):
    alice = builder.player("alice", team=Team.CT)
    bob = builder.player("bob", team=Team.TERRORIST)
    carol = builder.player("carol", team=Team.CT)
    return alice, bob, carol


class TestParse:
    """Tests for parsing a decoded stream into a MatchLedger."""

    def test_server_info(self, builder_factory):
        builder = builder_factory(map_name="de_inferno", tick_interval=1 / 128)
        ledger = builder.parse()

        assert ledger.map_name == "de_inferno"
        assert ledger.tick_rate == 128

    def test_missing_server_info_uses_default_tick_rate(self, builder_factory):
        builder = builder_factory(map_name=None)
        builder.round_start(10)

        ledger = builder.parse()

        assert ledger.tick_rate == 64
        assert ledger.map_name == ""

    def test_kills_deaths_assists(self, builder, players):
        alice, bob, carol = players
        builder.round_start(64)
        builder.kill(100, alice, bob, headshot=True, assister=carol)
        builder.kill(200, bob, carol)
        ledger = builder.parse()

        a = ledger.get_player(alice.steam_id)
        b = ledger.get_player(bob.steam_id)
        c = ledger.get_player(carol.steam_id)
        assert (a.kills, a.deaths, a.headshot_count) == (1, 0, 1)
        assert (b.kills, b.deaths) == (1, 1)
        assert (c.assists, c.deaths) == (1, 1)
        assert a.weapon("ak47").kills == 1

    def test_suicide_counts_death_only(self, builder, players):
        alice = players[0]
        builder.kill(100, alice, alice, weapon="hegrenade")
        ledger = builder.parse()

        record = ledger.get_player(alice.steam_id)
        assert (record.kills, record.deaths) == (0, 1)

    def test_accuracy_ignores_grenades_and_knives(self, builder, players):
        alice, bob, carol = players
        builder.fire(100, alice, "weapon_ak47")
        builder.fire(101, alice, "weapon_hegrenade")
        builder.fire(102, alice, "weapon_knife")
        builder.hurt(103, alice, bob, 27, weapon="ak47")
        builder.hurt(104, alice, bob, 50, weapon="hegrenade")
        ledger = builder.parse()

        record = ledger.get_player(alice.steam_id)
        assert [w.weapon_name for w in record.weapons] == ["ak47"]
        assert record.accuracy == pytest.approx(1.0)
        assert record.auxiliary_counters["damage_dealt"] == 77
        assert record.auxiliary_counters["grenade_damage"] == 50

    def test_event_missing_participant_is_dropped(self, builder, players):
        alice = players[0]
        builder.add(100, PlayerDeath(killer=alice, victim=None, weapon="ak47"))
        builder.fire(110, alice)
        ledger = builder.parse()

        assert [e.type for e in ledger.events][1:] == ["WeaponFire"]
        assert ledger.get_player(alice.steam_id).kills == 0

    def test_participants_are_bound_to_stable_ids(self, builder, players):
        alice, bob, carol = players
        builder.kill(100, alice, bob)
        ledger = builder.parse()

        death = ledger.events[-1].data
        assert death.killer.player_id == alice.steam_id
        assert death.victim.player_id == bob.steam_id

    def test_backwards_tick_aborts(self, builder, players):
        builder.fire(200, players[0])
        builder.fire(100, players[0])

        with pytest.raises(LedgerOrderError):
            builder.parse()

    def test_same_tick_events_keep_stream_order(self, builder, players):
        alice, bob, carol = players
        builder.fire(100, alice)
        builder.fire(100, bob)
        builder.fire(100, carol)
        ledger = builder.parse()

        fires = ledger.events[1:]
        assert [e.sequence for e in fires] == [0, 1, 2]
        assert [e.data.player.name for e in fires] == ["alice", "bob", "carol"]


class TestParseSession:
    """Tests for session lifecycle."""

    def test_sessions_are_independent(self):
        """Parsing twice gives the same ordering; no counters leak between runs."""
        shooter = Participant(user_id=1, steam_id=76561198000000001, name="alice", team=3)
        events = [
            DecodedEvent(tick=64, data=RoundStart()),
            DecodedEvent(tick=64, data=WeaponFire(player=shooter, weapon="ak47")),
        ]

        first = parse(events)
        second = parse(events)

        assert [e.order_key for e in first.events] == [e.order_key for e in second.events]
        assert first.events[1].order_key == (64.0, 1)

    def test_new_session_resets(self):
        session = ParseSession(AnalysisConfig())
        session.ingest(DecodedEvent(tick=500, data=RoundStart()))
        session.new_session()

        event = session.ingest(DecodedEvent(tick=10, data=RoundStart()))

        assert event.order_key == (10.0, 0)

    def test_finalized_session_rejects_events(self):
        session = ParseSession()
        session.finalize()

        with pytest.raises(RuntimeError):
            session.ingest(DecodedEvent(tick=1, data=RoundStart()))
