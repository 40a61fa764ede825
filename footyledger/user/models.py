"""Data models for users."""

from __future__ import annotations

from collections import UserDict

from footyledger.constants import ELEVATED_ROLES, ROLE_USER
from footyledger.core.types import FirestoreDocument


class User(FirestoreDocument, total=False):
    """A user document in Firestore."""

    email: str
    passwordHash: str
    role: str


class Principal(UserDict):
    """The authenticated user acting on a request."""

    @property
    def id(self) -> str:
        """Return the user ID."""
        return str(self.get("uid", ""))

    @property
    def role(self) -> str:
        """Return the user's role."""
        return str(self.get("role") or ROLE_USER)

    @property
    def is_elevated(self) -> bool:
        """Return True for administrators and organizers."""
        return self.role in ELEVATED_ROLES

    def to_public_dict(self) -> dict[str, str]:
        """Return the fields that are safe to send to the client."""
        return {"id": self.id, "email": str(self.get("email", "")), "role": self.role}
