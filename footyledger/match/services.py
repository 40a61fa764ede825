"""Service layer for match data access."""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING, Any, Mapping

from footyledger.access import Capability, owner_id_of, require, require_principal
from footyledger.constants import (
    CREATED_AT,
    MATCH_AWAY_TEAM_ID,
    MATCH_DATE,
    MATCH_FIELDS,
    MATCH_HOME_TEAM_ID,
    MATCH_TOURNAMENT_ID,
    MATCHES_COLLECTION,
    OWNER_ID,
    TOURNAMENT_TEAMS,
    TOURNAMENTS_COLLECTION,
    UPDATED_AT,
)
from footyledger.core.ids import is_valid_id, normalize_id
from footyledger.errors import InvalidIdentifierError, NotFoundError, ValidationError
from footyledger.store import project_documents, sort_documents
from footyledger.tournament.services import TournamentService

from .models import MatchPayload, validate_match_payload

if TYPE_CHECKING:
    from footyledger.store import DocumentStore, Filter, SortKey
    from footyledger.tournament.models import Tournament
    from footyledger.user.models import Principal

    from .models import Match

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class MatchService:
    """Service class for match-related operations."""

    @staticmethod
    def _ensure_on_roster(tournament: Tournament, payload: MatchPayload) -> None:
        """Reject teams that are not part of the tournament."""
        roster = {normalize_id(t.get("id")) for t in tournament.get(TOURNAMENT_TEAMS) or []}
        for field, team_id in (
            (MATCH_HOME_TEAM_ID, payload.home_team_id),
            (MATCH_AWAY_TEAM_ID, payload.away_team_id),
        ):
            if team_id not in roster:
                raise ValidationError(field, "unknown_team", f"Unknown team for {field}")

    @staticmethod
    def create_match(
        store: DocumentStore,
        data: Mapping[str, Any],
        principal: Principal | None,
        tournament_id: str | None = None,
    ) -> str:
        """Record a match and return its ID.

        ``tournament_id`` comes from the URL on the tournament route and from
        the body on the flat route; without one the match is unscoped and
        owned by its creator.
        """
        principal = require_principal(principal)
        if tournament_id is None:
            tournament_id = data.get(MATCH_TOURNAMENT_ID)

        tournament = None
        if tournament_id is not None:
            tournament = TournamentService.load_for_update(
                store, tournament_id, principal
            )

        payload = validate_match_payload(data)
        if tournament is not None:
            MatchService._ensure_on_roster(tournament, payload)

        now = _now()
        match_doc = {
            **payload.to_document(),
            MATCH_TOURNAMENT_ID: tournament_id,
            OWNER_ID: principal.id,
            CREATED_AT: now,
            UPDATED_AT: now,
        }
        match_id = store.insert(MATCHES_COLLECTION, match_doc)
        logger.info(f"Match {match_id} recorded by {principal.id} in {tournament_id}")
        return match_id

    @staticmethod
    def get_match(
        store: DocumentStore, match_id: str, principal: Principal | None
    ) -> Match:
        """Fetch a match or raise if the id is malformed or unknown."""
        require(principal, None, Capability.READ)
        if not is_valid_id(match_id):
            raise InvalidIdentifierError("Invalid match id")
        match = store.find_by_id(MATCHES_COLLECTION, match_id)
        if match is None:
            raise NotFoundError("Match not found")
        return match  # type: ignore[return-value]

    @staticmethod
    def _owning_tournament(store: DocumentStore, match: Match) -> Tournament | None:
        tournament_id = normalize_id(match.get(MATCH_TOURNAMENT_ID))
        if not tournament_id or not is_valid_id(tournament_id):
            return None
        return store.find_by_id(TOURNAMENTS_COLLECTION, tournament_id)  # type: ignore[return-value]

    @staticmethod
    def load_for_update(
        store: DocumentStore, match_id: str, principal: Principal | None
    ) -> tuple[Match, Tournament | None]:
        """Fetch a match the principal may modify, with its tournament.

        Matches of a tournament belong to the tournament's owner. Unscoped
        matches, and matches whose tournament is gone, belong to their creator.
        """
        match = MatchService.get_match(store, match_id, principal)
        tournament = MatchService._owning_tournament(store, match)
        owner = owner_id_of(tournament) if tournament is not None else owner_id_of(match)
        require(principal, owner, Capability.MUTATE)
        return match, tournament

    @staticmethod
    def update_match(
        store: DocumentStore,
        match_id: str,
        data: Mapping[str, Any],
        principal: Principal | None,
        partial: bool = False,
    ) -> Match:
        """Replace (or, with ``partial``, patch) the result fields of a match.

        A partial update is merged into the stored match and the merged result
        is validated, so it can never leave a match with equal teams. Fields
        other than the match result are ignored.
        """
        match, tournament = MatchService.load_for_update(store, match_id, principal)
        if partial:
            merged = {field: match.get(field) for field in MATCH_FIELDS}
            merged.update({k: v for k, v in data.items() if k in MATCH_FIELDS})
        else:
            merged = dict(data)

        payload = validate_match_payload(merged)
        if tournament is not None:
            MatchService._ensure_on_roster(tournament, payload)

        updates = {**payload.to_document(), UPDATED_AT: _now()}
        if not store.update(MATCHES_COLLECTION, match_id, updates):
            raise NotFoundError("Match not found")
        match.update(updates)  # type: ignore[typeddict-item]
        return match

    @staticmethod
    def delete_match(
        store: DocumentStore, match_id: str, principal: Principal | None
    ) -> None:
        """Delete a single match."""
        MatchService.load_for_update(store, match_id, principal)
        if not store.delete_one(MATCHES_COLLECTION, match_id):
            raise NotFoundError("Match not found")
        logger.info(f"Match {match_id} deleted by {principal.id if principal else None}")

    @staticmethod
    def list_matches(  # noqa: PLR0913
        store: DocumentStore,
        principal: Principal | None,
        filters: list[Filter] | None = None,
        team_id: str | None = None,
        sort: list[SortKey] | None = None,
        projection: list[str] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of matches and the total number of matches.

        ``team_id`` matches either side and is resolved with one query per
        side, merged here.
        """
        require(principal, None, Capability.READ)
        filters = list(filters or [])
        if not team_id:
            total = store.count(MATCHES_COLLECTION, filters)
            items = store.find_many(
                MATCHES_COLLECTION, filters, sort, projection, skip, limit
            )
            return items, total

        merged: dict[str, dict[str, Any]] = {}
        for side in (MATCH_HOME_TEAM_ID, MATCH_AWAY_TEAM_ID):
            for doc in store.find_many(
                MATCHES_COLLECTION, [*filters, (side, "==", team_id)]
            ):
                merged.setdefault(doc["id"], doc)

        docs = sort_documents(list(merged.values()), sort)
        end = skip + limit if limit is not None else None
        return project_documents(docs[skip:end], projection), len(docs)

    @staticmethod
    def list_tournament_matches(
        store: DocumentStore, tournament_id: str, principal: Principal | None
    ) -> list[dict[str, Any]]:
        """Return every match of a tournament ordered by date."""
        require(principal, None, Capability.READ)
        TournamentService.get_tournament(store, tournament_id)
        return TournamentService.find_matches(
            store, tournament_id, sort=[(MATCH_DATE, False), (CREATED_AT, False)]
        )
