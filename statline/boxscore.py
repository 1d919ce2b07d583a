"""Tabulate ledger aggregates as pandas box scores."""

from collections.abc import Hashable

import pandas as pd

from statline.basketball import format_percentage
from statline.game import Game, PeriodType
from statline.stats import OPPONENT_ID, Stat, Team, is_sentinel, parse_participant
from statline.stores import StatStore, StatTable


STAT_COLUMNS = {
    Stat.TWO_POINT_MAKES: "FG2M",
    Stat.TWO_POINT_ATTEMPTS: "FG2A",
    Stat.THREE_POINT_MAKES: "FG3M",
    Stat.THREE_POINT_ATTEMPTS: "FG3A",
    Stat.FREE_THROWS_MADE: "FTM",
    Stat.FREE_THROWS_ATTEMPTED: "FTA",
    Stat.OFFENSIVE_REBOUNDS: "OREB",
    Stat.DEFENSIVE_REBOUNDS: "DREB",
    Stat.ASSISTS: "AST",
    Stat.STEALS: "STL",
    Stat.BLOCKS: "BLK",
    Stat.DEFLECTIONS: "DEFL",
    Stat.TURNOVERS: "TO",
    Stat.FOULS_COMMITTED: "PF",
    Stat.FOULS_DRAWN: "PFD",
    Stat.POINTS: "PTS",
    Stat.PLUS_MINUS: "PLUS_MINUS",
}


def stat_frame(
    store: StatStore, keys: list | None = None, index_name: str = "KEY"
) -> pd.DataFrame:
    """
    Build a DataFrame with one row per key and one column per stat.

    Args:
        store: Store to read
        keys: Row keys (defaults to every key of a StatTable)
        index_name: Name for the index

    Returns:
        Integer DataFrame with STAT_COLUMNS names
    """
    if keys is None:
        keys = store.keys() if isinstance(store, StatTable) else []

    rows = [store.get(key) for key in keys]
    data = {column: [row[stat] for row in rows] for stat, column in STAT_COLUMNS.items()}
    return pd.DataFrame(data, index=pd.Index(keys, name=index_name), dtype=int)


def _add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["FGM"] = df["FG2M"] + df["FG3M"]
    df["FGA"] = df["FG2A"] + df["FG3A"]
    df["REB"] = df["OREB"] + df["DREB"]

    # Hustle value and efficiency, as on the public box score pages
    df["HV"] = df["REB"] + df["AST"] + df["BLK"] + df["STL"] - df["TO"]
    df["EFF"] = (
        df["PTS"] + df["REB"] + df["AST"] + df["STL"] + df["BLK"]
        - (df["FGA"] - df["FGM"]) - (df["FTA"] - df["FTM"]) - df["TO"]
    )

    df["FG_PCT"] = [format_percentage(m, a) for m, a in zip(df["FGM"], df["FGA"])]
    df["FG3_PCT"] = [format_percentage(m, a) for m, a in zip(df["FG3M"], df["FG3A"])]
    df["FT_PCT"] = [format_percentage(m, a) for m, a in zip(df["FTM"], df["FTA"])]
    return df


def box_score_frame(game: Game, include_sentinels: bool = False) -> pd.DataFrame:
    """
    Box score for the game: one row per player who has a stat line.

    Players on the game-played list without any stats get a zero row.
    The "Opponent" and "Team" buckets are left out unless requested.
    """
    keys: list[Hashable] = game.box_score.keys()
    keys += [pid for pid in game.game_played_list if pid not in game.box_score]

    if not include_sentinels:
        keys = [key for key in keys if not is_sentinel(parse_participant(key))]

    df = stat_frame(game.box_score, keys, index_name="PLAYER_ID")
    return _add_derived_columns(df)


def team_totals_frame(game: Game) -> pd.DataFrame:
    """Running totals for both teams, indexed "US" / "OPPONENT"."""
    df = stat_frame(game.stat_totals, [Team.US, Team.OPPONENT], index_name="TEAM")
    df.index = pd.Index([team.name for team in (Team.US, Team.OPPONENT)], name="TEAM")
    return _add_derived_columns(df)


def lineup_frame(game: Game) -> pd.DataFrame:
    return stat_frame(game.lineup_stats, index_name="LINEUP_ID")


def period_label(period_index: int, period_type: PeriodType = PeriodType.QUARTERS) -> str:
    """Label a period: Q1-Q4 or H1-H2, then OT1, OT2, ..."""
    regulation = int(period_type)
    if period_index < regulation:
        prefix = "Q" if period_type == PeriodType.QUARTERS else "H"
        return f"{prefix}{period_index + 1}"
    return f"OT{period_index - regulation + 1}"


def period_scores_frame(game: Game) -> pd.DataFrame:
    """Per-period line score with a running total row at the end."""
    df = pd.DataFrame(
        {
            "PERIOD": [period_label(i, game.period_type) for i in range(len(game.periods))],
            "US": [p.us_score for p in game.periods],
            "OPPONENT": [p.opponent_score for p in game.periods],
        }
    )
    total = pd.DataFrame({"PERIOD": ["TOTAL"], "US": [df["US"].sum()], "OPPONENT": [df["OPPONENT"].sum()]})
    return pd.concat([df, total], ignore_index=True)


def reconcile_totals(game: Game) -> dict[Team, dict[Stat, int]]:
    """
    Compare summed box-score rows against the team running totals.

    Our rows (players plus the "Team" bucket) must add up to the US totals
    and the "Opponent" row must equal the OPPONENT totals, for every stat
    but plus-minus (which every player on court receives in full).

    Returns:
        {team: {stat: totals - rows}} for each mismatch; empty when consistent
    """
    rows = stat_frame(game.box_score)
    us_rows = rows.drop(index=[OPPONENT_ID], errors="ignore")

    sums = {
        Team.US: us_rows.sum(),
        Team.OPPONENT: rows.loc[OPPONENT_ID] if OPPONENT_ID in rows.index else None,
    }

    mismatches: dict[Team, dict[Stat, int]] = {}
    for team, summed in sums.items():
        totals = game.stat_totals.get(team)
        for stat, column in STAT_COLUMNS.items():
            if stat == Stat.PLUS_MINUS:
                continue
            row_value = int(summed[column]) if summed is not None else 0
            diff = totals[stat] - row_value
            if diff != 0:
                mismatches.setdefault(team, {})[stat] = diff

    return mismatches
