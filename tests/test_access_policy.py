"""Tests for the access control policy."""

from __future__ import annotations

import unittest

from footyledger.access import (
    Capability,
    authorize,
    owner_id_of,
    require,
    require_principal,
)
from footyledger.errors import ForbiddenError, NotAuthenticatedError
from footyledger.user.models import Principal


class FakeRef:
    """Stand-in for a Firestore DocumentReference."""

    def __init__(self, id_: str) -> None:
        self.id = id_


def principal(uid: str, role: str = "user") -> Principal:
    """Return a principal with the given id and role."""
    return Principal({"uid": uid, "role": role})


class AuthorizeTestCase(unittest.TestCase):
    """Tests for the decision function."""

    def test_no_principal_is_not_authenticated(self) -> None:
        """Anonymous requests are denied whatever the owner and capability."""
        for owner in (None, "u1", FakeRef("u1")):
            for capability in Capability:
                decision = authorize(None, owner, capability)
                self.assertFalse(decision)
                self.assertEqual(decision.reason, "not_authenticated")

    def test_principal_without_id_is_not_authenticated(self) -> None:
        """A session principal without an id counts as anonymous."""
        decision = authorize(Principal({}), "u1", Capability.READ)
        self.assertEqual(decision.reason, "not_authenticated")

    def test_elevated_roles_always_allowed(self) -> None:
        """Admins and organizers may do anything to any resource."""
        for role in ("admin", "organizer"):
            for owner in (None, "someone", FakeRef("someone")):
                with self.subTest(role=role, owner=owner):
                    self.assertTrue(
                        authorize(principal("x", role), owner, Capability.MUTATE)
                    )

    def test_read_allowed_for_any_authenticated_user(self) -> None:
        """Reading needs a login but no ownership."""
        self.assertTrue(authorize(principal("u2"), "u1", Capability.READ))

    def test_owner_may_mutate(self) -> None:
        """The owner may change its resource."""
        self.assertTrue(authorize(principal("u1"), "u1", Capability.MUTATE))

    def test_owner_stored_as_reference(self) -> None:
        """Owner ids stored as references compare by id."""
        self.assertTrue(authorize(principal("u1"), FakeRef("u1")))

    def test_non_owner_is_forbidden(self) -> None:
        """Anyone else is denied with forbidden."""
        for owner in ("u1", FakeRef("u1"), None):
            decision = authorize(principal("u2"), owner, Capability.MUTATE)
            self.assertFalse(decision.allowed)
            self.assertEqual(decision.reason, "forbidden")

    def test_unknown_role_is_treated_as_user(self) -> None:
        """Roles outside the known set get no extra rights."""
        decision = authorize(principal("u2", "superuser"), "u1")
        self.assertEqual(decision.reason, "forbidden")


class RequireTestCase(unittest.TestCase):
    """Tests for the raising wrappers."""

    def test_require_raises_not_authenticated(self) -> None:
        """Anonymous requests raise NotAuthenticatedError."""
        with self.assertRaises(NotAuthenticatedError):
            require(None, "u1", Capability.READ)

    def test_require_raises_forbidden(self) -> None:
        """Non-owners raise ForbiddenError."""
        with self.assertRaises(ForbiddenError):
            require(principal("u2"), "u1")

    def test_require_passes(self) -> None:
        """Allowed requests return quietly."""
        require(principal("u1"), "u1")

    def test_require_principal(self) -> None:
        """The principal is returned when present."""
        user = principal("u1")
        self.assertIs(require_principal(user), user)
        with self.assertRaises(NotAuthenticatedError):
            require_principal(None)


class OwnerIdOfTestCase(unittest.TestCase):
    """Tests for reading the owner of a stored document."""

    def test_canonical_owner_id(self) -> None:
        """The string ownerId is used as is."""
        self.assertEqual(owner_id_of({"ownerId": "u1"}), "u1")

    def test_owner_reference(self) -> None:
        """A reference in ownerId is normalized."""
        self.assertEqual(owner_id_of({"ownerId": FakeRef("u1")}), "u1")

    def test_legacy_owner_ref(self) -> None:
        """Older documents keep the owner in ownerRef."""
        self.assertEqual(owner_id_of({"ownerRef": FakeRef("u3")}), "u3")

    def test_no_owner(self) -> None:
        """Documents without an owner have none."""
        self.assertIsNone(owner_id_of({}))


if __name__ == "__main__":
    unittest.main()
