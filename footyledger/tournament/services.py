"""Service layer for tournament business logic."""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import TYPE_CHECKING, Any

from footyledger.access import Capability, owner_id_of, require, require_principal
from footyledger.constants import (
    CREATED_AT,
    LEGACY_OWNER_REF,
    MATCH_AWAY_TEAM_ID,
    MATCH_HOME_TEAM_ID,
    MATCH_TOURNAMENT_ID,
    MATCHES_COLLECTION,
    OWNER_ID,
    TOURNAMENT_NAME,
    TOURNAMENT_TEAMS,
    TOURNAMENT_VIEWS,
    TOURNAMENTS_COLLECTION,
    USERS_COLLECTION,
)
from footyledger.core.ids import is_valid_id, normalize_id
from footyledger.errors import (
    AppError,
    DuplicateResourceError,
    InvalidIdentifierError,
    NotFoundError,
)
from footyledger.store import sort_documents

from .standings import StandingsRow, compute_standings

if TYPE_CHECKING:
    from footyledger.store import DocumentStore, Filter, SortKey
    from footyledger.user.models import Principal

    from .models import Team, Tournament

logger = logging.getLogger(__name__)

NEWEST_FIRST = [(CREATED_AT, True)]


class TournamentService:
    """Handles business logic and data access for tournaments."""

    @staticmethod
    def get_tournament(store: DocumentStore, tournament_id: str) -> Tournament:
        """Fetch a tournament or raise if the id is malformed or unknown."""
        if not is_valid_id(tournament_id):
            raise InvalidIdentifierError("Invalid tournament id")
        tournament = store.find_by_id(TOURNAMENTS_COLLECTION, tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament not found")
        return tournament  # type: ignore[return-value]

    @staticmethod
    def load_for_update(
        store: DocumentStore, tournament_id: str, principal: Principal | None
    ) -> Tournament:
        """Fetch a tournament the principal is allowed to modify."""
        require(principal, None, Capability.READ)
        tournament = TournamentService.get_tournament(store, tournament_id)
        require(principal, owner_id_of(tournament), Capability.MUTATE)
        return tournament

    @staticmethod
    def match_scopes(store: DocumentStore, tournament_id: str) -> list[list[Filter]]:
        """Filters selecting a tournament's matches.

        Older matches hold a reference to the tournament document rather than
        its id, so both forms are queried.
        """
        return [
            [(MATCH_TOURNAMENT_ID, "==", tournament_id)],
            [
                (
                    MATCH_TOURNAMENT_ID,
                    "==",
                    store.reference(TOURNAMENTS_COLLECTION, tournament_id),
                )
            ],
        ]

    @staticmethod
    def find_matches(
        store: DocumentStore,
        tournament_id: str,
        filters: list[Filter] | None = None,
        sort: list[SortKey] | None = None,
    ) -> list[dict[str, Any]]:
        """Return the matches of a tournament, merged by id and sorted."""
        merged: dict[str, dict[str, Any]] = {}
        for scope in TournamentService.match_scopes(store, tournament_id):
            for doc in store.find_many(MATCHES_COLLECTION, [*scope, *(filters or [])]):
                merged.setdefault(doc["id"], doc)
        return sort_documents(list(merged.values()), sort)

    @staticmethod
    def delete_matches(
        store: DocumentStore, tournament_id: str, filters: list[Filter] | None = None
    ) -> int:
        """Delete the matches of a tournament. Returns the deleted count."""
        return sum(
            store.delete_many(MATCHES_COLLECTION, [*scope, *(filters or [])])
            for scope in TournamentService.match_scopes(store, tournament_id)
        )

    @staticmethod
    def create_tournament(
        store: DocumentStore, name: str, principal: Principal | None
    ) -> str:
        """Create an empty tournament owned by the principal and return its ID."""
        principal = require_principal(principal)
        tournament_id = store.insert(
            TOURNAMENTS_COLLECTION,
            {
                TOURNAMENT_NAME: name,
                OWNER_ID: principal.id,
                TOURNAMENT_TEAMS: [],
                TOURNAMENT_VIEWS: 0,
                CREATED_AT: datetime.datetime.now(datetime.timezone.utc),
            },
        )
        logger.info(f"Tournament {tournament_id} created by {principal.id}")
        return tournament_id

    @staticmethod
    def list_tournaments(
        store: DocumentStore,
        principal: Principal | None,
        skip: int = 0,
        limit: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of tournaments visible to the principal and the total.

        Admins and organizers see every tournament, everyone else the ones
        they own.
        """
        principal = require_principal(principal)
        if principal.is_elevated:
            total = store.count(TOURNAMENTS_COLLECTION)
            items = store.find_many(
                TOURNAMENTS_COLLECTION, sort=NEWEST_FIRST, skip=skip, limit=limit
            )
            return items, total

        user_ref = store.reference(USERS_COLLECTION, principal.id)
        owned: dict[str, dict[str, Any]] = {}
        for field, value in (
            (OWNER_ID, principal.id),
            (OWNER_ID, user_ref),
            (LEGACY_OWNER_REF, user_ref),
        ):
            for doc in store.find_many(TOURNAMENTS_COLLECTION, [(field, "==", value)]):
                owned.setdefault(doc["id"], doc)

        items = sort_documents(list(owned.values()), NEWEST_FIRST)
        end = skip + limit if limit is not None else None
        return items[skip:end], len(items)

    @staticmethod
    def view_tournament(
        store: DocumentStore, tournament_id: str, principal: Principal | None
    ) -> dict[str, Any]:
        """Fetch a tournament for display and count the view."""
        require(principal, None, Capability.READ)
        if not is_valid_id(tournament_id):
            raise InvalidIdentifierError("Invalid tournament id")
        tournament = store.increment(
            TOURNAMENTS_COLLECTION, tournament_id, TOURNAMENT_VIEWS
        )
        if tournament is None:
            raise NotFoundError("Tournament not found")
        return tournament

    @staticmethod
    def rename_tournament(
        store: DocumentStore, tournament_id: str, name: str, principal: Principal | None
    ) -> None:
        """Change the display name of a tournament."""
        TournamentService.load_for_update(store, tournament_id, principal)
        if not store.update(TOURNAMENTS_COLLECTION, tournament_id, {TOURNAMENT_NAME: name}):
            raise NotFoundError("Tournament not found")

    @staticmethod
    def delete_tournament(
        store: DocumentStore, tournament_id: str, principal: Principal | None
    ) -> None:
        """Delete a tournament and every match that belongs to it.

        Both deletes are attempted even when the first one fails. Nothing is
        rolled back; a failure is logged and the first error is raised.
        """
        TournamentService.load_for_update(store, tournament_id, principal)

        first_error: AppError | None = None
        try:
            store.delete_one(TOURNAMENTS_COLLECTION, tournament_id)
        except AppError as e:
            logger.error(f"Failed to delete tournament {tournament_id}: {e}")
            first_error = e

        try:
            deleted = TournamentService.delete_matches(store, tournament_id)
        except AppError as e:
            logger.warning(
                f"Tournament {tournament_id} removed but its matches were not: {e}"
            )
            first_error = first_error or e
        else:
            logger.info(
                f"Tournament {tournament_id} deleted with {deleted} match(es)"
            )

        if first_error is not None:
            raise first_error

    @staticmethod
    def add_team(
        store: DocumentStore, tournament_id: str, name: str, principal: Principal | None
    ) -> str:
        """Add a team to the roster and return its new ID.

        The name check and the insert happen in one transaction, so two
        concurrent requests for the same name cannot both succeed.
        """
        TournamentService.load_for_update(store, tournament_id, principal)
        team: Team = {"id": uuid.uuid4().hex, "name": name}

        def name_is_free(data: dict[str, Any]) -> bool:
            return all(t.get("name") != name for t in data.get(TOURNAMENT_TEAMS) or [])

        def append_team(data: dict[str, Any]) -> dict[str, Any]:
            return {TOURNAMENT_TEAMS: [*(data.get(TOURNAMENT_TEAMS) or []), team]}

        matched = store.update_one_conditional(
            TOURNAMENTS_COLLECTION, tournament_id, name_is_free, append_team
        )
        if not matched:
            raise DuplicateResourceError("Team already exists or tournament not found")
        logger.info(f"Team {team['id']} ({name}) added to tournament {tournament_id}")
        return team["id"]

    @staticmethod
    def remove_team(
        store: DocumentStore,
        tournament_id: str,
        team_id: str,
        principal: Principal | None,
    ) -> int:
        """Remove a team from the roster along with its matches.

        Returns the number of matches deleted.
        """
        TournamentService.load_for_update(store, tournament_id, principal)
        if not is_valid_id(team_id):
            raise InvalidIdentifierError("Invalid team id")

        def drop_team(data: dict[str, Any]) -> dict[str, Any]:
            return {
                TOURNAMENT_TEAMS: [
                    t
                    for t in data.get(TOURNAMENT_TEAMS) or []
                    if normalize_id(t.get("id")) != team_id
                ]
            }

        store.update_one_conditional(
            TOURNAMENTS_COLLECTION, tournament_id, lambda data: True, drop_team
        )

        deleted = 0
        for side in (MATCH_HOME_TEAM_ID, MATCH_AWAY_TEAM_ID):
            deleted += TournamentService.delete_matches(
                store, tournament_id, [(side, "==", team_id)]
            )
        logger.info(
            f"Team {team_id} removed from tournament {tournament_id}, "
            f"{deleted} match(es) deleted"
        )
        return deleted

    @staticmethod
    def get_standings(
        store: DocumentStore, tournament_id: str, principal: Principal | None
    ) -> list[StandingsRow]:
        """Compute the league table of a tournament."""
        require(principal, None, Capability.READ)
        tournament = TournamentService.get_tournament(store, tournament_id)
        matches = TournamentService.find_matches(store, tournament_id)
        return compute_standings(
            tournament_id, tournament.get(TOURNAMENT_TEAMS) or [], matches
        )
