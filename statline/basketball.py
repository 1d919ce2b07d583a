"""Point and classification helpers for recorded basketball actions."""

from typing import Optional

from statline.stats import ACTION_STATS, OpponentTeam, Stat, Team, parse_participant


# Fouls and deflections touch the ball without taking possession.
NON_POSSESSION_STATS = (Stat.FOULS_COMMITTED, Stat.FOULS_DRAWN, Stat.DEFLECTIONS)

_POINT_VALUES = {
    Stat.FREE_THROWS_MADE: 1,
    Stat.TWO_POINT_MAKES: 2,
    Stat.THREE_POINT_MAKES: 3,
}


def points_for_stat(stat: Stat) -> int:
    """Return the points earned by a stat (0 for anything but a make)."""
    return _POINT_VALUES.get(stat, 0)


def is_scoring_stat(stat: Stat) -> bool:
    return stat in _POINT_VALUES


def points_for_event(event) -> int:
    """Return the points a logged play contributes to its period score."""
    return points_for_stat(event.action)


def team_for_participant(participant_id: str) -> Team:
    """Opponent bucket scores for the opponent, everyone else for us."""
    if isinstance(parse_participant(participant_id), OpponentTeam):
        return Team.OPPONENT
    return Team.US


def log_action_for(stats: list[Stat]) -> Optional[Stat]:
    """
    Determine which stat, if any, goes into the play-by-play log.

    A make arrives as a [make, attempt] pair and is logged as the make; a
    single action is logged as itself. Any other size is not logged.

    Args:
        stats: The action set being recorded

    Returns:
        The stat to log, or None when no play-by-play entry is made
    """
    if len(stats) in (1, 2):
        return stats[0]
    return None


def log_entry_count(stats: list[Stat]) -> int:
    """Number of play-by-play entries an action set produces (0 or 1)."""
    return 0 if log_action_for(stats) is None else 1


def is_reversible_action_set(stats: list[Stat]) -> bool:
    """
    Check that a logged action set can be recovered from its log entry.

    A pair must be a make followed by its attempt; a single stat must not
    be a make (a make always comes with its attempt). Sets of any other
    size are never logged and are not checked here.
    """
    if len(stats) == 1:
        return not is_scoring_stat(stats[0])
    if len(stats) == 2:
        return tuple(stats) in ACTION_STATS.values()
    return True


def plus_minus_for_team(team: Team, points: int) -> tuple[int, int]:
    """
    Split a scoring play into plus-minus deltas for both sides.

    Args:
        team: Team that scored
        points: Signed point amount (negative when reversing)

    Returns:
        Tuple of (us_delta, opponent_delta)
    """
    us_delta = -points if team == Team.OPPONENT else points
    return us_delta, -us_delta


def should_reset_lineup(stats: list[Stat], is_opponent: bool) -> bool:
    """
    Decide whether the active lineup/set ends with this action.

    A set stays active for the whole possession. It resets when we turn the
    ball over, or when the opponent records anything other than a foul or a
    deflection.
    """
    if not stats:
        return False

    if not is_opponent:
        return Stat.TURNOVERS in stats

    return not all(stat in NON_POSSESSION_STATS for stat in stats)


def calculate_player_averages(stats: dict[Stat, int], games_played: int) -> dict[Stat, float]:
    """
    Calculate per-game averages from cumulative stats.

    Args:
        stats: Cumulative stat line
        games_played: Number of games played

    Returns:
        Stat line of per-game averages (all zeros when no games were played)
    """
    if games_played == 0:
        return {stat: 0.0 for stat in Stat}
    return {stat: stats.get(stat, 0) / games_played for stat in Stat}


def format_percentage(makes: int, attempts: int, decimals: int = 1) -> str:
    """Format a shooting percentage, or "-" when there are no attempts."""
    if not attempts:
        return "-"
    return f"{makes / attempts * 100:.{decimals}f}%"
