"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from footyledger.errors import NotAuthenticatedError


def login_required(f):
    """Reject the request unless a user is logged in.

    Usage:
    @login_required
    def protected_view():
        ...
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get("user") is None:
            raise NotAuthenticatedError()
        return f(*args, **kwargs)

    return decorated_function
