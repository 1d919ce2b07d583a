"""Shared test fixtures for games, career stores and logged plays."""

import pytest

from statline.game import Event, Period, create_game
from statline.stats import Stat
from statline.stores import CareerStores


@pytest.fixture
def game():
    """Fresh game for team-1 with an empty first period."""
    return create_game("team-1", "Rivals", game_id="g1")


@pytest.fixture
def career() -> CareerStores:
    return CareerStores()


@pytest.fixture
def roster() -> list[str]:
    return ["p1", "p2", "p3", "p4", "p5"]


@pytest.fixture
def ledger_snapshot():
    """Return a function capturing every non-zero counter of a game and career stores."""

    def snapshot(game, career) -> dict:
        stores = {
            "box_score": game.box_score,
            "stat_totals": game.stat_totals,
            "lineup_stats": game.lineup_stats,
            "players": career.players,
            "teams": career.teams,
            "lineups": career.lineups,
        }
        result = {}
        for name, store in stores.items():
            for key, row in store.rows().items():
                for stat, value in row.items():
                    if value:
                        result[(name, key, stat)] = value
        return result

    return snapshot


@pytest.fixture
def sample_events() -> dict:
    """Hand-built plays: two made baskets for us, a made three for them, a rebound."""
    return {
        "a": Event(id="a", player_id="p1", action=Stat.TWO_POINT_MAKES),
        "b": Event(id="b", player_id="Opponent", action=Stat.THREE_POINT_MAKES),
        "c": Event(id="c", player_id="p2", action=Stat.DEFENSIVE_REBOUNDS),
        "d": Event(id="d", player_id="p2", action=Stat.TWO_POINT_MAKES),
        "e": Event(id="e", player_id="Opponent", action=Stat.FREE_THROWS_MADE),
    }


@pytest.fixture
def two_period_game(game, sample_events):
    """
    Game with two periods logged newest-first.

    Period 0 chronological: a, b, c  (us 2, opponent 3)
    Period 1 chronological: d, e     (us 2, opponent 1)
    """
    ev = sample_events
    game.periods = [
        Period(us_score=2, opponent_score=3, events=[ev["c"], ev["b"], ev["a"]]),
        Period(us_score=2, opponent_score=1, events=[ev["e"], ev["d"]]),
    ]
    return game
