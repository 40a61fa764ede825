"""Ownership based access control shared by every resource type."""

from .policy import (
    Capability,
    Decision,
    authorize,
    owner_id_of,
    require,
    require_principal,
)

__all__ = [
    "Capability",
    "Decision",
    "authorize",
    "owner_id_of",
    "require",
    "require_principal",
]
