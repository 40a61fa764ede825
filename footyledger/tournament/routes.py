"""Routes for the tournament blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, g, jsonify

from footyledger import get_store
from footyledger.auth.decorators import login_required
from footyledger.utils import (
    get_json_body,
    page_envelope,
    parse_pagination,
    serialize_document,
    validate_form,
)

from . import bp
from .forms import TeamForm, TournamentForm
from .services import TournamentService


@bp.route("", methods=["GET"])
@login_required
def list_tournaments() -> Any:
    """List the tournaments visible to the user, newest first."""
    page, limit, skip = parse_pagination()
    items, total = TournamentService.list_tournaments(
        get_store(), g.user, skip=skip, limit=limit
    )
    return jsonify(
        page_envelope([serialize_document(t) for t in items], page, limit, total)
    )


@bp.route("", methods=["POST"])
@login_required
def create_tournament() -> Any:
    """Create a new tournament."""
    form = TournamentForm()
    validate_form(form)
    tournament_id = TournamentService.create_tournament(
        get_store(), form.name.data, g.user
    )
    return jsonify({"id": tournament_id}), 201


@bp.route("/<string:tournament_id>", methods=["GET"])
@login_required
def view_tournament(tournament_id: str) -> Any:
    """View a single tournament."""
    tournament = TournamentService.view_tournament(get_store(), tournament_id, g.user)
    return jsonify(serialize_document(tournament))


@bp.route("/<string:tournament_id>", methods=["PUT", "PATCH"])
@login_required
def rename_tournament(tournament_id: str) -> Any:
    """Rename a tournament."""
    form = TournamentForm()
    validate_form(form)
    TournamentService.rename_tournament(
        get_store(), tournament_id, form.name.data, g.user
    )
    return jsonify({"message": "Tournament updated"})


@bp.route("/<string:tournament_id>", methods=["DELETE"])
@login_required
def delete_tournament(tournament_id: str) -> Any:
    """Delete a tournament and its matches."""
    TournamentService.delete_tournament(get_store(), tournament_id, g.user)
    current_app.logger.info(f"Tournament {tournament_id} deleted by {g.user.id}")
    return "", 204


@bp.route("/<string:tournament_id>/teams", methods=["POST"])
@login_required
def add_team(tournament_id: str) -> Any:
    """Add a team to the tournament roster."""
    form = TeamForm()
    validate_form(form)
    team_id = TournamentService.add_team(
        get_store(), tournament_id, form.name.data, g.user
    )
    return jsonify({"teamId": team_id}), 201


@bp.route("/<string:tournament_id>/teams/<string:team_id>", methods=["DELETE"])
@login_required
def remove_team(tournament_id: str, team_id: str) -> Any:
    """Remove a team and the matches it played."""
    TournamentService.remove_team(get_store(), tournament_id, team_id, g.user)
    return "", 204


@bp.route("/<string:tournament_id>/matches", methods=["GET"])
@login_required
def list_matches(tournament_id: str) -> Any:
    """List the matches of a tournament."""
    from footyledger.match.services import MatchService

    matches = MatchService.list_tournament_matches(get_store(), tournament_id, g.user)
    return jsonify({"items": [serialize_document(m) for m in matches]})


@bp.route("/<string:tournament_id>/matches", methods=["POST"])
@login_required
def create_match(tournament_id: str) -> Any:
    """Record a match between two teams of the tournament."""
    from footyledger.match.services import MatchService

    match_id = MatchService.create_match(
        get_store(), get_json_body(), g.user, tournament_id=tournament_id
    )
    return jsonify({"id": match_id}), 201


@bp.route("/<string:tournament_id>/standings", methods=["GET"])
@login_required
def standings(tournament_id: str) -> Any:
    """Return the league table of a tournament."""
    rows = TournamentService.get_standings(get_store(), tournament_id, g.user)
    return jsonify(
        {"tournamentId": tournament_id, "standings": [row.to_dict() for row in rows]}
    )
