"""Data models for tournaments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypedDict

from footyledger.core.types import FirestoreDocument

if TYPE_CHECKING:
    from footyledger.user import User


class Team(TypedDict):
    """A team embedded in a tournament roster."""

    id: str
    name: str


class Tournament(FirestoreDocument, total=False):
    """A tournament document in Firestore."""

    name: str
    teams: list[Team]
    views: int
    ownerId: str | User | Any
    # Written by older releases as a DocumentReference.
    ownerRef: User | Any
