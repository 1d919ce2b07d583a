"""Game, period and play-by-play event entities."""

import uuid
from dataclasses import dataclass, field
from enum import IntEnum

from statline.stats import Stat, Team, is_sentinel, parse_participant
from statline.stores import StatTable


class PeriodType(IntEnum):
    HALVES = 2
    QUARTERS = 4


def new_event_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Event:
    """
    One logged play.

    captured_active_players and captured_lineup_id are the on-court players and
    lineup at the time the play was recorded, so the play can be reversed
    exactly after substitutions. Legacy plays may carry None for both.
    """

    id: str
    player_id: str
    action: Stat
    captured_active_players: tuple[str, ...] | None = None
    captured_lineup_id: str | None = None

    @property
    def participant(self):
        return parse_participant(self.player_id)


@dataclass
class Period:
    """Score and newest-first play log for one period."""

    us_score: int = 0
    opponent_score: int = 0
    events: list[Event] = field(default_factory=list)

    def score(self, team: Team) -> int:
        return self.us_score if team == Team.US else self.opponent_score

    def with_score(self, team: Team, value: int) -> "Period":
        """Return a copy of this period with one team's score replaced."""
        if team == Team.US:
            return Period(value, self.opponent_score, list(self.events))
        return Period(self.us_score, value, list(self.events))


@dataclass
class Game:
    id: str
    team_id: str
    opposing_team_name: str = ""
    period_type: PeriodType = PeriodType.QUARTERS
    active_players: list[str] = field(default_factory=list)
    game_played_list: list[str] = field(default_factory=list)
    periods: list[Period] = field(default_factory=list)
    box_score: StatTable = field(default_factory=StatTable)  # key: participant id
    stat_totals: StatTable = field(default_factory=StatTable)  # key: Team
    lineup_stats: StatTable = field(default_factory=StatTable)  # key: lineup id
    lineup_runs: dict[str, int] = field(default_factory=dict)  # key: lineup id
    is_finished: bool = False


def create_game(
    team_id: str,
    opposing_team_name: str = "",
    period_type: PeriodType = PeriodType.QUARTERS,
    game_id: str | None = None,
) -> Game:
    """Create a game with an empty first period."""
    return Game(
        id=game_id or new_event_id(),
        team_id=team_id,
        opposing_team_name=opposing_team_name,
        period_type=period_type,
        periods=[Period()],
    )


def add_players_to_game_played_list(game: Game, player_ids: list[str]) -> None:
    """Record players as having appeared in the game, skipping sentinel ids."""
    for player_id in player_ids:
        if is_sentinel(parse_participant(player_id)):
            continue
        if player_id not in game.game_played_list:
            game.game_played_list.append(player_id)


def mark_game_finished(game: Game) -> None:
    game.is_finished = True


def mark_game_active(game: Game) -> None:
    """Reopen a finished game for editing."""
    game.is_finished = False
