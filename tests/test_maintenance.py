"""Tests for the legacy-game repair routines."""

import pytest

from statline.game import Event, Period, create_game
from statline.maintenance import assign_missing_event_ids, rebuild_lineup_stats, repair_periods
from statline.stats import Stat
from statline.stores import StatTable
from statline.updates import apply_event


TWO = [Stat.TWO_POINT_MAKES, Stat.TWO_POINT_ATTEMPTS]


class FailingTable(StatTable):
    """StatTable that refuses positive Points writes."""

    def increment(self, key, stat, amount):
        if stat == Stat.POINTS and amount > 0:
            raise RuntimeError("store unavailable")
        super().increment(key, stat, amount)


class TestRepairPeriods:
    """Tests for repair_periods."""

    def test_fills_holes(self, game, sample_events, capsys):
        game.periods = [Period(us_score=2, events=[sample_events["a"]]), None, Period()]

        assert repair_periods(game) is True
        assert game.periods[1] == Period()
        assert game.periods[0].events == [sample_events["a"]]
        assert "Repaired missing periods" in capsys.readouterr().err

    def test_missing_event_list_keeps_scores(self, game):
        game.periods = [Period(us_score=5, opponent_score=4, events=None)]

        repair_periods(game)

        assert game.periods == [Period(us_score=5, opponent_score=4, events=[])]

    def test_healthy_game_untouched(self, two_period_game):
        before = two_period_game.periods
        assert repair_periods(two_period_game) is False
        assert two_period_game.periods is before


class TestAssignMissingEventIds:
    """Tests for assign_missing_event_ids."""

    def test_assigns_deterministic_ids(self, sample_events):
        game = create_game("team-1", game_id="g7")
        unnamed = Event(id="", player_id="p1", action=Stat.ASSISTS)
        game.periods = [Period(), Period(events=[sample_events["a"], unnamed])]

        assert assign_missing_event_ids({"g7": game}) == (1, 1)
        assert [e.id for e in game.periods[1].events] == ["a", "migrated-g7-1-1"]
        assert game.periods[1].events[1].action == Stat.ASSISTS

    def test_counts_games_and_plays(self, two_period_game):
        other = create_game("team-1", game_id="g2")
        other.periods = [
            Period(events=[Event(id="", player_id="p1", action=Stat.STEALS)]),
            Period(events=[Event(id="", player_id="p2", action=Stat.BLOCKS)]),
        ]

        result = assign_missing_event_ids({"g1": two_period_game, "g2": other})

        assert result == (1, 2)
        assert [p.events[0].id for p in other.periods] == ["migrated-g2-0-0", "migrated-g2-1-0"]

    def test_rerun_changes_nothing(self, game, career):
        apply_event(game, career, "team-1", TWO, "p1", "", 0, [])
        assert assign_missing_event_ids({"g1": game}) == (0, 0)


class TestRebuildLineupStats:
    """Tests for rebuild_lineup_stats."""

    def test_matches_recorded_stats(self, game, career):
        apply_event(game, career, "team-1", TWO, "p1", "set-1", 0, ["p1"])
        apply_event(game, career, "team-1", [Stat.ASSISTS], "p2", "set-1", 0, ["p1"])
        apply_event(game, career, "team-1", TWO, "Opponent", "set-1", 0, ["p1"])
        apply_event(game, career, "team-1", [Stat.STEALS], "p3", "set-2", 1, ["p1"])
        expected = game.lineup_stats.rows()

        game.lineup_stats.increment("set-1", Stat.POINTS, 40)
        replayed = rebuild_lineup_stats(game)

        assert replayed == 3
        assert game.lineup_stats.rows() == expected

    def test_idempotent(self, game, career):
        apply_event(game, career, "team-1", TWO, "p1", "set-1", 0, [])
        rebuild_lineup_stats(game)
        first = game.lineup_stats.rows()
        rebuild_lineup_stats(game)
        assert game.lineup_stats.rows() == first

    def test_legacy_plays_without_lineup_are_skipped(self, game):
        legacy = Event(id="x", player_id="p1", action=Stat.TWO_POINT_MAKES)
        game.periods = [Period(us_score=2, events=[legacy])]

        assert rebuild_lineup_stats(game) == 0
        assert len(game.lineup_stats) == 0

    def test_failing_store_keeps_old_rows(self, game, career):
        apply_event(game, career, "team-1", TWO, "p1", "set-1", 0, [])
        # Drifted row: makes over-counted, points lost
        game.lineup_stats = FailingTable(
            {"set-1": {Stat.TWO_POINT_MAKES: 5, Stat.TWO_POINT_ATTEMPTS: 1}}
        )
        before = game.lineup_stats.rows()

        with pytest.raises(RuntimeError):
            rebuild_lineup_stats(game)

        assert game.lineup_stats.rows() == before
