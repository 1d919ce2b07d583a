"""Repair routines for games recorded by older versions of the app."""

from dataclasses import replace

from statline.basketball import is_scoring_stat, points_for_stat
from statline.game import Game, Period
from statline.periods import _log_warning, chronological_events
from statline.stats import Stat, is_sentinel, parse_participant, stats_for_action
from statline.stores import ChangeSet


def repair_periods(game: Game) -> bool:
    """
    Replace missing periods and missing play logs with empty ones.

    Older games could skip a period (leaving a hole) or store a period
    without a play list.

    Returns:
        True if anything was repaired
    """
    repaired = False
    periods = []

    for period in game.periods:
        if period is None:
            periods.append(Period())
            repaired = True
        elif period.events is None:
            periods.append(Period(period.us_score, period.opponent_score, []))
            repaired = True
        else:
            periods.append(period)

    if repaired:
        _log_warning(f"Repaired missing periods in game {game.id}")
        game.periods = periods
    return repaired


def assign_missing_event_ids(games: dict[str, Game]) -> tuple[int, int]:
    """
    Give every play without an id a deterministic one.

    Ids take the form migrated-{game_id}-{period_index}-{position}.

    Args:
        games: Games keyed by game id

    Returns:
        Tuple of (games updated, plays updated)
    """
    games_updated = 0
    plays_updated = 0

    for game_id, game in games.items():
        game_changed = False
        periods = []

        for period_index, period in enumerate(game.periods):
            events = []
            for position, event in enumerate(period.events):
                if not event.id:
                    event = replace(event, id=f"migrated-{game_id}-{period_index}-{position}")
                    plays_updated += 1
                    game_changed = True
                events.append(event)
            periods.append(Period(period.us_score, period.opponent_score, events))

        if game_changed:
            game.periods = periods
            games_updated += 1

    return games_updated, plays_updated


def rebuild_lineup_stats(game: Game) -> int:
    """
    Recompute the game's lineup stats by replaying the play-by-play log.

    Every lineup row is zeroed, then each play recorded with a lineup is
    re-applied. Opponent and team-bucket plays never count toward a lineup.
    The zeroing and the replay are flushed together, so a failing store
    leaves the old rows in place. Safe to run repeatedly.

    Returns:
        Number of plays replayed
    """
    changes = ChangeSet()
    replayed = 0

    for lineup_id, row in game.lineup_stats.rows().items():
        for stat, value in row.items():
            changes.add(game.lineup_stats, lineup_id, stat, -value)

    for entry in chronological_events(game):
        event = entry.event
        if not event.captured_lineup_id or is_sentinel(parse_participant(event.player_id)):
            continue

        for stat in stats_for_action(event.action):
            changes.add(game.lineup_stats, event.captured_lineup_id, stat, 1)
            if is_scoring_stat(stat):
                changes.add(
                    game.lineup_stats, event.captured_lineup_id, Stat.POINTS, points_for_stat(stat)
                )
        replayed += 1

    changes.flush()
    return replayed
