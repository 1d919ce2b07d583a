"""Stat vocabulary shared by the ledger: stat kinds, teams and participants."""

from dataclasses import dataclass
from enum import Enum, IntEnum


OPPONENT_ID = "Opponent"
TEAM_ID = "Team"


class Stat(str, Enum):
    TWO_POINT_MAKES = "TwoPointMakes"
    TWO_POINT_ATTEMPTS = "TwoPointAttempts"
    THREE_POINT_MAKES = "ThreePointMakes"
    THREE_POINT_ATTEMPTS = "ThreePointAttempts"
    FREE_THROWS_MADE = "FreeThrowsMade"
    FREE_THROWS_ATTEMPTED = "FreeThrowsAttempted"
    ASSISTS = "Assists"
    OFFENSIVE_REBOUNDS = "OffensiveRebounds"
    DEFENSIVE_REBOUNDS = "DefensiveRebounds"
    STEALS = "Steals"
    BLOCKS = "Blocks"
    TURNOVERS = "Turnovers"
    FOULS_COMMITTED = "FoulsCommitted"
    FOULS_DRAWN = "FoulsDrawn"
    DEFLECTIONS = "Deflections"
    POINTS = "Points"
    PLUS_MINUS = "PlusMinus"


class Team(IntEnum):
    US = 0
    OPPONENT = 1


# A stored play records only the first stat of its action set, so reversal
# needs the full set back. Makes expand to make + attempt.
ACTION_STATS: dict[Stat, tuple[Stat, ...]] = {
    Stat.TWO_POINT_MAKES: (Stat.TWO_POINT_MAKES, Stat.TWO_POINT_ATTEMPTS),
    Stat.THREE_POINT_MAKES: (Stat.THREE_POINT_MAKES, Stat.THREE_POINT_ATTEMPTS),
    Stat.FREE_THROWS_MADE: (Stat.FREE_THROWS_MADE, Stat.FREE_THROWS_ATTEMPTED),
}


def empty_stat_line() -> dict[Stat, int]:
    """Return a zero-initialized stat line with every Stat present."""
    return {stat: 0 for stat in Stat}


def stats_for_action(action: Stat) -> list[Stat]:
    """
    Recover the action set that produced a logged play.

    Args:
        action: The stat recorded on the play

    Returns:
        The constituent stats, e.g. [TwoPointMakes, TwoPointAttempts] for a made 2
    """
    return list(ACTION_STATS.get(action, (action,)))


@dataclass(frozen=True)
class Player:
    player_id: str

    @property
    def id(self) -> str:
        return self.player_id


@dataclass(frozen=True)
class OpponentTeam:
    @property
    def id(self) -> str:
        return OPPONENT_ID


@dataclass(frozen=True)
class TeamBucket:
    @property
    def id(self) -> str:
        return TEAM_ID


Participant = Player | OpponentTeam | TeamBucket


def parse_participant(participant_id: str) -> Participant:
    """Map a stored participant id onto the participant union."""
    if participant_id == OPPONENT_ID:
        return OpponentTeam()
    if participant_id == TEAM_ID:
        return TeamBucket()
    return Player(participant_id)


def is_sentinel(participant: Participant) -> bool:
    """True for the un-individuated Opponent and Team buckets."""
    return not isinstance(participant, Player)
