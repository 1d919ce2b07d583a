"""Recording and reversing plays across every stat aggregate.

A recorded action set (e.g. [TwoPointMakes, TwoPointAttempts]) fans out into
the game box score, the game team totals, the game lineup stats and the
career player/team/lineup stores, plus one play-by-play entry. Reversal
replays the same computation with the opposite sign, so recording and
reversing go through a single code path.
"""

from dataclasses import dataclass, field
from typing import Optional

from statline.basketball import (
    is_reversible_action_set,
    is_scoring_stat,
    log_action_for,
    plus_minus_for_team,
    points_for_stat,
    should_reset_lineup,
    team_for_participant,
)
from statline.game import Event, Game, new_event_id
from statline.periods import _log_warning, append_event, remove_at
from statline.stats import Stat, Team, is_sentinel, parse_participant, stats_for_action
from statline.stores import CareerStores, ChangeSet


@dataclass(frozen=True)
class EventAction:
    """One action to record, as passed to apply_events."""

    stats: list[Stat]
    participant_id: str
    lineup_id: str = ""
    period_index: int = 0
    active_players: list[str] = field(default_factory=list)


def build_event_changes(
    game: Game,
    career: CareerStores,
    team_id: str,
    stats: list[Stat],
    participant_id: str,
    lineup_id: str,
    active_players: list[str],
    sign: int = 1,
) -> ChangeSet:
    """
    Compute every aggregate write for one action set without applying it.

    Args:
        game: Game owning the box score, team totals and lineup stats
        career: All-time stores
        team_id: Id of our team (key into the career team store)
        stats: Action set being recorded or reversed
        participant_id: Player id, or the "Opponent"/"Team" sentinel
        lineup_id: Active lineup/set id ("" when none)
        active_players: Player ids on court, credited with plus-minus
        sign: 1 to record, -1 to reverse

    Returns:
        ChangeSet holding the writes
    """
    participant = parse_participant(participant_id)
    team = team_for_participant(participant_id)
    # Sentinels have no individual or lineup stats
    track_player = not is_sentinel(participant)
    track_lineup = track_player and bool(lineup_id)

    changes = ChangeSet()

    def add(stat: Stat, amount: int) -> None:
        changes.add(game.box_score, participant_id, stat, amount)
        changes.add(game.stat_totals, team, stat, amount)
        changes.add(career.teams, (team_id, team), stat, amount)
        if track_lineup:
            changes.add(game.lineup_stats, lineup_id, stat, amount)
            changes.add(career.lineups, lineup_id, stat, amount)
        if track_player:
            changes.add(career.players, participant_id, stat, amount)

    for stat in stats:
        add(stat, sign)

        if not is_scoring_stat(stat):
            continue

        points = sign * points_for_stat(stat)
        add(Stat.POINTS, points)

        us_delta, opponent_delta = plus_minus_for_team(team, points)
        changes.add(game.stat_totals, Team.US, Stat.PLUS_MINUS, us_delta)
        changes.add(career.teams, (team_id, Team.US), Stat.PLUS_MINUS, us_delta)
        changes.add(game.stat_totals, Team.OPPONENT, Stat.PLUS_MINUS, opponent_delta)
        changes.add(career.teams, (team_id, Team.OPPONENT), Stat.PLUS_MINUS, opponent_delta)

        # Same magnitude for everyone on court; one roster is tracked
        for player_id in dict.fromkeys(active_players):
            changes.add(game.box_score, player_id, Stat.PLUS_MINUS, us_delta)
            changes.add(career.players, player_id, Stat.PLUS_MINUS, us_delta)

    return changes


def _event_for(stats: list[Stat], participant_id: str, lineup_id: str, active_players: list[str]):
    action = log_action_for(stats)
    if action is None:
        return None
    return Event(
        id=new_event_id(),
        player_id=participant_id,
        action=action,
        captured_active_players=tuple(dict.fromkeys(active_players)),
        captured_lineup_id=lineup_id,
    )


def end_lineup_run(game: Game, career: CareerStores, lineup_id: str) -> bool:
    """
    Count one completed run (possession) for a lineup, in the game and career.

    Returns:
        True if counted, False when no lineup is active
    """
    if not lineup_id:
        _log_warning(f"Cannot end lineup run in game {game.id}: no active lineup")
        return False

    game.lineup_runs[lineup_id] = game.lineup_runs.get(lineup_id, 0) + 1
    career.lineup_runs[lineup_id] = career.lineup_runs.get(lineup_id, 0) + 1
    return True


def decrement_lineup_run(career: CareerStores, lineup_id: str) -> bool:
    """Take back one career run for a lineup, never going below zero."""
    if lineup_id not in career.lineup_runs:
        _log_warning(f"Lineup {lineup_id} has no recorded runs")
        return False

    career.lineup_runs[lineup_id] = max(0, career.lineup_runs[lineup_id] - 1)
    return True


def _finish_possession(
    game: Game, career: CareerStores, stats: list[Stat], participant_id: str, lineup_id: str
) -> None:
    is_opponent = team_for_participant(participant_id) == Team.OPPONENT
    if lineup_id and should_reset_lineup(stats, is_opponent):
        end_lineup_run(game, career, lineup_id)


def _rejected_action_set(game: Game, stats: list[Stat], period_index: int) -> bool:
    if period_index < 0:
        _log_warning(f"Cannot record stats for game {game.id}: invalid period {period_index}")
        return True
    if not is_reversible_action_set(stats):
        _log_warning(f"Cannot record stats for game {game.id}: unsupported action set {list(stats)}")
        return True
    return False


def apply_event(
    game: Game,
    career: CareerStores,
    team_id: str,
    stats: list[Stat],
    participant_id: str,
    lineup_id: str,
    period_index: int,
    active_players: list[str],
) -> Optional[Event]:
    """
    Record one action: update every aggregate and log the play.

    The play-by-play entry records the first stat of the action set (the
    make, for a make + attempt pair) along with the active players and
    lineup at this moment. Action sets of more than two stats still update
    the aggregates but are not logged. A make must arrive as make + attempt;
    a lone make or an attempt-first pair is refused.

    When the action ends our possession (our turnover, or an opponent stat
    other than a foul or deflection) the active lineup's run is counted.

    Returns:
        The logged Event, or None if nothing was logged
    """
    if not stats:
        return None

    if _rejected_action_set(game, stats, period_index):
        return None

    build_event_changes(
        game, career, team_id, stats, participant_id, lineup_id, active_players
    ).flush()
    _finish_possession(game, career, stats, participant_id, lineup_id)

    event = _event_for(stats, participant_id, lineup_id, active_players)
    if event is None:
        return None
    return append_event(game, event, period_index)


def apply_events(
    game: Game, career: CareerStores, team_id: str, actions: list[EventAction]
) -> list[Event]:
    """
    Record several actions with a single aggregate flush.

    Used by importers and the simulator. Produces the same aggregates, lineup
    runs and log as calling apply_event once per action, in order. One
    invalid action rejects the whole batch.

    Returns:
        The logged events, oldest first
    """
    actions = [a for a in actions if a.stats]
    if any(_rejected_action_set(game, a.stats, a.period_index) for a in actions):
        return []

    changes = ChangeSet()
    for action in actions:
        changes.extend(
            build_event_changes(
                game, career, team_id, action.stats, action.participant_id,
                action.lineup_id, action.active_players,
            )
        )
    changes.flush()

    events = []
    for action in actions:
        _finish_possession(game, career, action.stats, action.participant_id, action.lineup_id)
        event = _event_for(
            action.stats, action.participant_id, action.lineup_id, action.active_players
        )
        if event is not None:
            append_event(game, event, action.period_index)
            events.append(event)
    return events


def reverse_event(
    game: Game,
    career: CareerStores,
    team_id: str,
    event: Event,
    fallback_active_players: list[str] | None = None,
    fallback_lineup_id: str = "",
) -> None:
    """
    Undo a logged play's aggregate contribution.

    Uses the active players and lineup captured on the play. Legacy plays
    recorded without them fall back to the caller's current context, which
    can misattribute plus-minus if the lineup has changed since.

    The play-by-play log and period scores are not touched; remove the play
    with periods.remove_at.
    """
    active_players = event.captured_active_players
    if active_players is None:
        active_players = fallback_active_players or []

    lineup_id = event.captured_lineup_id
    if lineup_id is None:
        lineup_id = fallback_lineup_id or ""

    build_event_changes(
        game,
        career,
        team_id,
        stats_for_action(event.action),
        event.player_id,
        lineup_id,
        list(active_players),
        sign=-1,
    ).flush()


def delete_event(
    game: Game,
    career: CareerStores,
    team_id: str,
    period_index: int,
    position: int,
    fallback_active_players: list[str] | None = None,
    fallback_lineup_id: str = "",
) -> Optional[Event]:
    """
    Reverse a play's aggregates and remove it from the log.

    Returns:
        The deleted event, or None if the period or position does not exist
    """
    if not 0 <= period_index < len(game.periods):
        _log_warning(f"Cannot delete play: period {period_index} does not exist in game {game.id}")
        return None

    events = game.periods[period_index].events
    if position < 0 or position >= len(events):
        _log_warning(f"Cannot delete play: invalid position {position} in period {period_index}")
        return None

    reverse_event(
        game, career, team_id, events[position], fallback_active_players, fallback_lineup_id
    )
    return remove_at(game, period_index, position)


def undo_last_event(
    game: Game,
    career: CareerStores,
    team_id: str,
    period_index: int,
    fallback_active_players: list[str] | None = None,
    fallback_lineup_id: str = "",
) -> Optional[Event]:
    """Delete the most recent play of a period."""
    if not 0 <= period_index < len(game.periods) or not game.periods[period_index].events:
        _log_warning(f"No play-by-play events to undo for period {period_index}")
        return None

    return delete_event(
        game, career, team_id, period_index, 0, fallback_active_players, fallback_lineup_id
    )
