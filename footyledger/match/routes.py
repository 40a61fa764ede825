"""Routes for the match blueprint."""

from __future__ import annotations

from typing import Any

from flask import g, jsonify, request

from footyledger import get_store
from footyledger.auth.decorators import login_required
from footyledger.constants import (
    MATCH_AWAY_TEAM_ID,
    MATCH_HOME_TEAM_ID,
    MATCH_TOURNAMENT_ID,
)
from footyledger.utils import (
    get_json_body,
    page_envelope,
    parse_fields,
    parse_pagination,
    parse_sort,
    serialize_document,
)

from . import bp
from .services import MatchService

FILTER_PARAMS = (MATCH_TOURNAMENT_ID, MATCH_HOME_TEAM_ID, MATCH_AWAY_TEAM_ID)


@bp.route("", methods=["GET"])
@login_required
def list_matches() -> Any:
    """List matches with optional filters, sorting, projection and paging."""
    page, limit, skip = parse_pagination()
    filters = [
        (param, "==", request.args[param])
        for param in FILTER_PARAMS
        if request.args.get(param)
    ]
    items, total = MatchService.list_matches(
        get_store(),
        g.user,
        filters=filters,
        team_id=request.args.get("team") or None,
        sort=parse_sort(request.args.get("sort")),
        projection=parse_fields(request.args.get("fields")),
        skip=skip,
        limit=limit,
    )
    return jsonify(
        page_envelope([serialize_document(m) for m in items], page, limit, total)
    )


@bp.route("/<string:match_id>", methods=["GET"])
@login_required
def view_match(match_id: str) -> Any:
    """Return a single match."""
    match = MatchService.get_match(get_store(), match_id, g.user)
    return jsonify(serialize_document(dict(match)))


@bp.route("", methods=["POST"])
@login_required
def create_match() -> Any:
    """Record a match, optionally under the tournament named in the body."""
    match_id = MatchService.create_match(get_store(), get_json_body(), g.user)
    return jsonify({"id": match_id}), 201


@bp.route("/<string:match_id>", methods=["PUT"])
@login_required
def replace_match(match_id: str) -> Any:
    """Replace the result of a match."""
    match = MatchService.update_match(get_store(), match_id, get_json_body(), g.user)
    return jsonify({"message": "Match updated", "match": serialize_document(dict(match))})


@bp.route("/<string:match_id>", methods=["PATCH"])
@login_required
def patch_match(match_id: str) -> Any:
    """Change some fields of a match result."""
    match = MatchService.update_match(
        get_store(), match_id, get_json_body(), g.user, partial=True
    )
    return jsonify({"message": "Match updated", "match": serialize_document(dict(match))})


@bp.route("/<string:match_id>", methods=["DELETE"])
@login_required
def delete_match(match_id: str) -> Any:
    """Delete a match."""
    MatchService.delete_match(get_store(), match_id, g.user)
    return "", 204
