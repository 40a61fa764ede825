"""Match blueprint."""

from flask import Blueprint

bp = Blueprint("match", __name__, url_prefix="/api/matches")

from . import routes  # noqa: E402, F401
from .models import Match, MatchPayload, validate_match_payload  # noqa: E402
from .services import MatchService  # noqa: E402

__all__ = ["Match", "MatchPayload", "MatchService", "routes", "validate_match_payload"]
