"""League table calculation for a tournament.

Every match contributes one row per side (home and away). Rows are grouped by
team and summed, points and goal difference are derived, and the table is
ordered by points, goal difference and goals scored, all descending. Teams
level on all three are ordered by team id so the table is deterministic.

Only teams that played appear in the table; a roster entry without matches
has no row. Matches whose team was removed from the roster keep counting and
are shown under ``UNKNOWN_TEAM_NAME``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from footyledger.constants import (
    MATCH_AWAY_SCORE,
    MATCH_AWAY_TEAM_ID,
    MATCH_HOME_SCORE,
    MATCH_HOME_TEAM_ID,
    POINTS_FOR_DRAW,
    POINTS_FOR_WIN,
    UNKNOWN_TEAM_NAME,
)
from footyledger.core.ids import normalize_id


@dataclass
class StandingsRow:
    """Aggregated results of one team."""

    team_id: str
    team_name: str = UNKNOWN_TEAM_NAME
    games: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def points(self) -> int:
        return self.wins * POINTS_FOR_WIN + self.draws * POINTS_FOR_DRAW

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the API field names."""
        return {
            "teamId": self.team_id,
            "teamName": self.team_name,
            "games": self.games,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
            "goalDiff": self.goal_diff,
            "points": self.points,
        }


def perspective_rows(match: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Split a match into a home row and an away row."""
    home_score = match[MATCH_HOME_SCORE]
    away_score = match[MATCH_AWAY_SCORE]
    sides = (
        (match[MATCH_HOME_TEAM_ID], home_score, away_score),
        (match[MATCH_AWAY_TEAM_ID], away_score, home_score),
    )
    return [
        {
            "team_id": normalize_id(team_id),
            "goals_for": scored,
            "goals_against": conceded,
            "win": int(scored > conceded),
            "draw": int(scored == conceded),
            "loss": int(scored < conceded),
        }
        for team_id, scored, conceded in sides
    ]


def aggregate_match_data(
    matches: Iterable[Mapping[str, Any]],
) -> dict[str, StandingsRow]:
    """Sum the perspective rows of all matches per team id."""
    standings: dict[str, StandingsRow] = {}
    for match in matches:
        for row in perspective_rows(match):
            entry = standings.setdefault(row["team_id"], StandingsRow(row["team_id"]))
            entry.games += 1
            entry.wins += row["win"]
            entry.draws += row["draw"]
            entry.losses += row["loss"]
            entry.goals_for += row["goals_for"]
            entry.goals_against += row["goals_against"]
    return standings


def sort_standings(rows: Iterable[StandingsRow]) -> list[StandingsRow]:
    """Order rows by points, goal difference, goals for, then team id."""
    return sorted(
        rows,
        key=lambda r: (-r.points, -r.goal_diff, -r.goals_for, r.team_id),
    )


def compute_standings(
    tournament_id: str,
    team_roster: Iterable[Mapping[str, Any]],
    matches: Iterable[Mapping[str, Any]],
) -> list[StandingsRow]:
    """Build the league table of a tournament.

    Args:
        tournament_id: The tournament the matches belong to. Only used to
            keep the call explicit; matches are not re-filtered here.
        team_roster: The tournament's teams, each with ``id`` and ``name``.
        matches: Validated match documents of the tournament.

    Returns:
        One ``StandingsRow`` per team that played, in table order.
    """
    names = {normalize_id(team.get("id")): team.get("name") for team in team_roster}
    rows = aggregate_match_data(matches)
    for team_id, row in rows.items():
        row.team_name = names.get(team_id) or UNKNOWN_TEAM_NAME
    return sort_standings(rows.values())
