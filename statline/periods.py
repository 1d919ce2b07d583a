"""Period play-by-play log management.

Plays are stored newest-first inside each period. Everything that needs
chronological order goes through chronological() / newest_first() so there
is exactly one place that flips the order.

Every operation builds a new periods list and assigns it to game.periods at
the end, so a rejected call leaves the game untouched.
"""

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from statline.basketball import points_for_event, team_for_participant
from statline.game import Event, Game, Period
from statline.stats import Team


def _log_warning(msg: str) -> None:
    """Log timestamped warning to stderr."""
    timestamp = datetime.now().isoformat()
    print(f"[{timestamp}] {msg}", file=sys.stderr, flush=True)


@dataclass(frozen=True)
class PlayEntry:
    event: Event
    period_index: int
    index_in_period: int
    cumulative_index: int


@dataclass(frozen=True)
class Divider:
    period_index: int

    @property
    def id(self) -> str:
        return f"divider-{self.period_index}"


@dataclass(frozen=True)
class PlayItem:
    event: Event
    period_index: int
    index_in_period: int

    @property
    def id(self) -> str:
        return self.event.id


def chronological(events: list[Event]) -> list[Event]:
    """Return a newest-first period log in chronological order."""
    return events[::-1]


def newest_first(events: list[Event]) -> list[Event]:
    """Return a chronological list of plays in storage (newest-first) order."""
    return events[::-1]


def _copy_periods(game: Game) -> list[Period]:
    return [Period(p.us_score, p.opponent_score, list(p.events)) for p in game.periods]


def _add_score(period: Period, team: Team, points: int) -> None:
    if team == Team.US:
        period.us_score += points
    else:
        period.opponent_score += points


def _has_period(game: Game, period_index: int) -> bool:
    return 0 <= period_index < len(game.periods)


def ensure_period(periods: list[Period], period_index: int) -> Period:
    """Materialize periods up to period_index (inclusive) and return it."""
    while len(periods) <= period_index:
        periods.append(Period())
    return periods[period_index]


def create_period(game: Game) -> int:
    """Append an empty period and return its index."""
    game.periods = _copy_periods(game) + [Period()]
    return len(game.periods) - 1


def append_event(game: Game, event: Event, period_index: int) -> Optional[Event]:
    """
    Log a play at the top (most recent end) of a period.

    Missing periods up to period_index are created. The play's points are
    added to the period score of the team that made it.

    Args:
        game: Game whose log is updated
        event: Play to log
        period_index: Target period (0 = first period)

    Returns:
        The logged event, or None if period_index is negative
    """
    if period_index < 0:
        _log_warning(f"Cannot log play {event.id}: invalid period {period_index}")
        return None

    periods = _copy_periods(game)
    period = ensure_period(periods, period_index)
    period.events.insert(0, event)
    _add_score(period, team_for_participant(event.player_id), points_for_event(event))

    game.periods = periods
    return event


def remove_at(game: Game, period_index: int, position: int) -> Optional[Event]:
    """
    Remove a play from a period log (position 0 = most recent).

    Only the log and the period score change. The caller is responsible for
    reversing the play's aggregates (see updates.reverse_event).

    Returns:
        The removed event, or None if the period or position does not exist
    """
    if not _has_period(game, period_index):
        _log_warning(f"Cannot remove play: period {period_index} does not exist in game {game.id}")
        return None

    if position < 0 or position >= len(game.periods[period_index].events):
        _log_warning(f"Cannot remove play: invalid position {position} in period {period_index}")
        return None

    periods = _copy_periods(game)
    period = periods[period_index]
    removed = period.events.pop(position)

    team = team_for_participant(removed.player_id)
    score = max(0, period.score(team) - points_for_event(removed))
    periods[period_index] = period.with_score(team, score)

    game.periods = periods
    return removed


def reorder(game: Game, period_index: int, from_pos: int, to_pos: int) -> bool:
    """
    Move a play within one period's log.

    Positions are storage positions (newest-first). Scores do not change.

    Returns:
        True if the log changed, False on an invalid period or position
    """
    if not _has_period(game, period_index):
        _log_warning(f"Cannot reorder plays: period {period_index} does not exist in game {game.id}")
        return False

    count = len(game.periods[period_index].events)
    if not (0 <= from_pos < count and 0 <= to_pos < count):
        _log_warning(f"Invalid positions: from_pos={from_pos}, to_pos={to_pos}")
        return False

    if from_pos == to_pos:
        return False

    periods = _copy_periods(game)
    events = periods[period_index].events
    events.insert(to_pos, events.pop(from_pos))

    game.periods = periods
    return True


def move_across_periods(
    game: Game, from_period: int, from_pos: int, to_period: int, to_pos: int
) -> bool:
    """
    Move a play from one period's log into another's.

    The play's points leave the source period score and join the destination
    period score (for the team derived from the play's participant). The
    destination is created if needed; to_pos is clamped to its length.

    Returns:
        True if the play moved, False on an invalid period or position
    """
    if not _has_period(game, from_period):
        _log_warning(f"Invalid period indices: from {from_period}, to {to_period}")
        return False

    source_count = len(game.periods[from_period].events)
    if from_pos < 0 or from_pos >= source_count:
        _log_warning(f"Invalid from_pos: {from_pos}")
        return False

    if to_period < 0 or to_pos < 0:
        _log_warning(f"Invalid destination: period {to_period}, position {to_pos}")
        return False

    if from_period == to_period:
        return reorder(game, from_period, from_pos, min(to_pos, source_count - 1))

    periods = _copy_periods(game)
    destination = ensure_period(periods, to_period)
    source = periods[from_period]

    event = source.events.pop(from_pos)
    team = team_for_participant(event.player_id)
    points = points_for_event(event)

    _add_score(source, team, -points)
    destination.events.insert(min(to_pos, len(destination.events)), event)
    _add_score(destination, team, points)

    game.periods = periods
    return True


def delete_period(game: Game, period_index: int) -> bool:
    """
    Delete a period by merging it into the period before it.

    The deleted period's plays happened later, so they are prepended to the
    previous period's newest-first log, and both teams' scores are added in.
    Later periods shift down by one. The first period can never be deleted.

    Returns:
        True if the period was merged away, False if rejected
    """
    if period_index == 0:
        _log_warning("Cannot delete the first period")
        return False

    if not _has_period(game, period_index):
        _log_warning(f"Period {period_index} does not exist in game {game.id}")
        return False

    periods = _copy_periods(game)
    deleted = periods[period_index]
    previous = periods[period_index - 1]

    periods[period_index - 1] = Period(
        us_score=previous.us_score + deleted.us_score,
        opponent_score=previous.opponent_score + deleted.opponent_score,
        events=deleted.events + previous.events,
    )
    del periods[period_index]

    game.periods = periods
    return True


def reset_period(game: Game, period_index: int) -> bool:
    """
    Clear a period's log and zero both of its scores.

    Aggregates are left alone; reverse the plays first if they should go too.

    Returns:
        True if the period was cleared, False if it does not exist
    """
    if not _has_period(game, period_index):
        _log_warning(f"No period found with index {period_index}")
        return False

    periods = _copy_periods(game)
    periods[period_index] = Period()

    game.periods = periods
    return True


def chronological_events(game: Game) -> list[PlayEntry]:
    """
    Flatten every period's log into one chronological list.

    Returns:
        PlayEntry per play with its period, its storage position within the
        period, and its position in the whole game
    """
    entries = []
    for period_index, period in enumerate(game.periods):
        count = len(period.events)
        for offset, event in enumerate(chronological(period.events)):
            entries.append(
                PlayEntry(
                    event=event,
                    period_index=period_index,
                    index_in_period=count - 1 - offset,
                    cumulative_index=len(entries),
                )
            )
    return entries


def running_scores(game: Game) -> dict[str, tuple[int, int]]:
    """Map each play id to the (us, opponent) score right after that play."""
    us_score, opponent_score = 0, 0
    scores = {}

    for entry in chronological_events(game):
        points = points_for_event(entry.event)
        if team_for_participant(entry.event.player_id) == Team.OPPONENT:
            opponent_score += points
        else:
            us_score += points
        scores[entry.event.id] = (us_score, opponent_score)

    return scores


def rebuild_from_flat_assignment(game: Game, assignment: dict[str, int]) -> bool:
    """
    Rebuild every period from a full play -> period reassignment.

    Plays keep their chronological order; each period's log is rebuilt
    newest-first and both scores are recomputed from scratch. The number of
    periods does not change.

    Args:
        game: Game to rebuild
        assignment: Period index for every play id currently in the log

    Returns:
        True if the periods were rebuilt, False if the assignment was rejected
    """
    entries = chronological_events(game)
    known_ids = {entry.event.id for entry in entries}

    missing = known_ids - set(assignment)
    unknown = set(assignment) - known_ids
    if missing or unknown:
        _log_warning(
            f"Cannot rebuild periods: {len(missing)} unassigned and {len(unknown)} unknown plays"
        )
        return False

    period_count = len(game.periods)
    bad_periods = {p for p in assignment.values() if not 0 <= p < period_count}
    if bad_periods:
        _log_warning(f"Cannot rebuild periods: invalid period indices {sorted(bad_periods)}")
        return False

    buckets: list[list[Event]] = [[] for _ in range(period_count)]
    for entry in entries:
        buckets[assignment[entry.event.id]].append(entry.event)

    periods = []
    for plays in buckets:
        period = Period(events=newest_first(plays))
        for event in plays:
            _add_score(period, team_for_participant(event.player_id), points_for_event(event))
        periods.append(period)

    game.periods = periods
    return True


def timeline(game: Game) -> list[Divider | PlayItem]:
    """Chronological view of the game: each period's divider followed by its plays."""
    items: list[Divider | PlayItem] = []
    for period_index, period in enumerate(game.periods):
        items.append(Divider(period_index))
        count = len(period.events)
        for offset, event in enumerate(chronological(period.events)):
            items.append(PlayItem(event, period_index, count - 1 - offset))
    return items


def is_valid_divider_position(
    items: list[Divider | PlayItem], period_index: int, drop_index: int
) -> bool:
    """
    Check that a relocated divider keeps periods in strict order.

    Args:
        items: Timeline after the divider has been dropped
        period_index: Period whose divider moved
        drop_index: Position of the divider in items

    Returns:
        False if the divider is the first period's, or lands at/before the
        previous divider or at/after the next one
    """
    if period_index == 0:
        return False

    previous_index, next_index = -1, -1
    for idx, item in enumerate(items):
        if not isinstance(item, Divider) or idx == drop_index:
            continue
        if item.period_index == period_index - 1:
            previous_index = idx
        elif item.period_index == period_index + 1:
            next_index = idx

    if previous_index != -1 and drop_index <= previous_index:
        return False
    if next_index != -1 and drop_index >= next_index:
        return False
    return True


def move_period_divider(game: Game, period_index: int, drop_index: int) -> bool:
    """
    Relocate a period boundary in the chronological timeline.

    The divider for period_index is taken out of timeline(game) and dropped
    at drop_index. Plays are reassigned to whichever divider now precedes
    them and all periods are rebuilt in one step.

    Returns:
        True if the periods were rebuilt, False if the move was invalid or
        changed nothing
    """
    if not _has_period(game, period_index):
        _log_warning(f"Period {period_index} does not exist in game {game.id}")
        return False

    items = timeline(game)
    from_index = next(
        idx for idx, item in enumerate(items)
        if isinstance(item, Divider) and item.period_index == period_index
    )

    if drop_index < 0 or drop_index >= len(items):
        _log_warning(f"Invalid divider position: {drop_index}")
        return False

    if drop_index == from_index:
        return False

    divider = items.pop(from_index)
    items.insert(drop_index, divider)

    if not is_valid_divider_position(items, period_index, drop_index):
        _log_warning(f"Rejected divider move for period {period_index} to position {drop_index}")
        return False

    assignment = {}
    zone = 0
    for item in items:
        if isinstance(item, Divider):
            zone = item.period_index
        else:
            assignment[item.event.id] = zone

    return rebuild_from_flat_assignment(game, assignment)
