"""Routes for the auth blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, g, jsonify, session
from flask_wtf.csrf import generate_csrf

from footyledger import get_store
from footyledger.user.models import Principal
from footyledger.utils import validate_form

from . import bp
from .decorators import login_required
from .forms import LoginForm, RegisterForm
from .services import UserService


def _start_session(user: Principal) -> None:
    session.clear()
    session.permanent = True
    session["user_id"] = user.id


@bp.route("/register", methods=["POST"])
def register() -> Any:
    """Create an account and log it in."""
    form = RegisterForm()
    validate_form(form)
    user = UserService.register(
        get_store(),
        form.email.data,
        form.password.data,
        role=form.role.data,
        allow_elevated=current_app.config.get("ALLOW_ELEVATED_REGISTRATION", False),
    )
    _start_session(user)
    return jsonify({"message": "Registered", "user": user.to_public_dict()}), 201


@bp.route("/login", methods=["POST"])
def login() -> Any:
    """Check credentials and start a session."""
    form = LoginForm()
    validate_form(form)
    user = UserService.authenticate(get_store(), form.email.data, form.password.data)
    _start_session(user)
    current_app.logger.info(f"User {user.id} logged in")
    return jsonify({"message": "Logged in", "user": user.to_public_dict()})


@bp.route("/logout", methods=["POST"])
def logout() -> Any:
    """Clear the server-side session."""
    session.clear()
    return jsonify({"message": "Logged out"})


@bp.route("/me", methods=["GET"])
@login_required
def me() -> Any:
    """Return the logged in user."""
    return jsonify({"user": g.user.to_public_dict()})


@bp.route("/csrf", methods=["GET"])
def csrf_token() -> Any:
    """Hand out a CSRF token for the X-CSRFToken header of JSON clients."""
    return jsonify({"csrfToken": generate_csrf()})
