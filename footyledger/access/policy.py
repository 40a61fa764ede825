"""Access control policy for tournaments, their teams and matches.

One decision function covers every resource. Rules, first match wins:

1. no principal: deny, ``not_authenticated``
2. admin or organizer: allow
3. reading: allow any authenticated principal
4. principal id equals the owner id: allow
5. otherwise: deny, ``forbidden``

Owner ids are compared in canonical string form because older documents
store the owner as a ``DocumentReference`` instead of a plain id.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from footyledger.constants import ELEVATED_ROLES, LEGACY_OWNER_REF, OWNER_ID
from footyledger.core.ids import normalize_id
from footyledger.errors import ForbiddenError, NotAuthenticatedError

if TYPE_CHECKING:
    from footyledger.user.models import Principal

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "not_authenticated"
FORBIDDEN = "forbidden"


class Capability(enum.Enum):
    """What the principal wants to do with the resource."""

    READ = "read"
    MUTATE = "mutate"


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def owner_id_of(document: Mapping[str, Any]) -> str | None:
    """Return the canonical owner id of a stored document."""
    owner = document.get(OWNER_ID)
    if owner is None:
        owner = document.get(LEGACY_OWNER_REF)
    return normalize_id(owner)


def authorize(
    principal: Principal | None,
    resource_owner_id: Any,
    required_capability: Capability = Capability.MUTATE,
) -> Decision:
    """Decide whether ``principal`` may use ``required_capability`` on a resource."""
    if principal is None or not principal.id:
        return Decision(False, NOT_AUTHENTICATED)
    if principal.role in ELEVATED_ROLES:
        return ALLOW
    if required_capability is Capability.READ:
        return ALLOW
    owner_id = normalize_id(resource_owner_id)
    if owner_id is not None and owner_id == normalize_id(principal.id):
        return ALLOW
    return Decision(False, FORBIDDEN)


def require(
    principal: Principal | None,
    resource_owner_id: Any,
    required_capability: Capability = Capability.MUTATE,
) -> None:
    """Raise unless ``authorize`` allows the request."""
    decision = authorize(principal, resource_owner_id, required_capability)
    if decision.allowed:
        return
    if decision.reason == NOT_AUTHENTICATED:
        raise NotAuthenticatedError()
    logger.warning(
        f"Denied {required_capability.value} for user "
        f"{principal.id if principal else None} on resource owned by "
        f"{normalize_id(resource_owner_id)}"
    )
    raise ForbiddenError()


def require_principal(principal: Principal | None) -> Principal:
    """Return the principal, raising if the request is not authenticated."""
    require(principal, None, Capability.READ)
    return principal  # type: ignore[return-value]
