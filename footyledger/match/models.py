"""Data models for matches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from footyledger.constants import (
    MATCH_AWAY_SCORE,
    MATCH_AWAY_TEAM_ID,
    MATCH_DATE,
    MATCH_HOME_SCORE,
    MATCH_HOME_TEAM_ID,
)
from footyledger.core.ids import is_valid_id
from footyledger.core.types import FirestoreDocument
from footyledger.errors import ValidationError

if TYPE_CHECKING:
    from footyledger.user import User


class Match(FirestoreDocument, total=False):
    """A match document in Firestore."""

    tournamentId: str | None
    homeTeamId: str
    awayTeamId: str
    homeScore: int
    awayScore: int
    date: Any
    ownerId: str | User | Any


@dataclass
class MatchPayload:
    """A validated match submission."""

    home_team_id: str
    away_team_id: str
    home_score: int
    away_score: int
    date: Any

    def to_document(self) -> dict[str, Any]:
        """Return the Firestore fields of the submission."""
        return {
            MATCH_HOME_TEAM_ID: self.home_team_id,
            MATCH_AWAY_TEAM_ID: self.away_team_id,
            MATCH_HOME_SCORE: self.home_score,
            MATCH_AWAY_SCORE: self.away_score,
            MATCH_DATE: self.date,
        }


def _is_score(value: Any) -> bool:
    # bool is an int subclass but never a score.
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_match_payload(payload: Mapping[str, Any]) -> MatchPayload:
    """Check a match submission and return it as a ``MatchPayload``.

    Raises:
        ValidationError: naming the first offending field.
    """
    home_team_id = payload.get(MATCH_HOME_TEAM_ID)
    away_team_id = payload.get(MATCH_AWAY_TEAM_ID)

    if not is_valid_id(home_team_id):
        raise ValidationError(MATCH_HOME_TEAM_ID, "invalid_identifier")
    if not is_valid_id(away_team_id):
        raise ValidationError(MATCH_AWAY_TEAM_ID, "invalid_identifier")
    if home_team_id == away_team_id:
        raise ValidationError(
            MATCH_AWAY_TEAM_ID, "same_team", "Teams must be different."
        )

    date = payload.get(MATCH_DATE)
    if date is None or date == "":
        raise ValidationError(MATCH_DATE, "required", "date required")

    for field in (MATCH_HOME_SCORE, MATCH_AWAY_SCORE):
        if not _is_score(payload.get(field)):
            raise ValidationError(field, "invalid_score", f"Invalid {field}")

    return MatchPayload(
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        home_score=payload[MATCH_HOME_SCORE],
        away_score=payload[MATCH_AWAY_SCORE],
        date=date,
    )
