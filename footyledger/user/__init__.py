"""User documents and the session principal."""

from .models import Principal, User

__all__ = ["Principal", "User"]
