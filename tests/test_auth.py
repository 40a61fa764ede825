"""Tests for the auth blueprint and the user service."""

from __future__ import annotations

import unittest

from footyledger.auth.services import UserService
from footyledger.errors import DuplicateResourceError, NotAuthenticatedError
from tests.mock_utils import (
    TEST_PASSWORD,
    ApiTestCase,
    MockFirestoreBuilder,
    add_user,
    make_store,
)


class UserServiceTestCase(unittest.TestCase):
    """Tests for UserService."""

    def setUp(self) -> None:
        """Create an empty store."""
        self.store = make_store(MockFirestoreBuilder.build())

    def test_normalize_email(self) -> None:
        """Emails are trimmed and lower-cased."""
        self.assertEqual(UserService.normalize_email("  Bob@Example.COM "), "bob@example.com")
        self.assertEqual(UserService.normalize_email(None), "")

    def test_register_hashes_password(self) -> None:
        """The password is never stored in clear text."""
        user = UserService.register(self.store, "Bob@example.com", TEST_PASSWORD)

        stored = self.store.find_by_id("users", user.id)
        self.assertEqual(stored["email"], "bob@example.com")
        self.assertNotEqual(stored["passwordHash"], TEST_PASSWORD)
        self.assertEqual(stored["role"], "user")

    def test_register_duplicate_email(self) -> None:
        """Emails are unique regardless of case."""
        UserService.register(self.store, "bob@example.com", TEST_PASSWORD)
        with self.assertRaises(DuplicateResourceError):
            UserService.register(self.store, "BOB@example.com", TEST_PASSWORD)

    def test_register_role(self) -> None:
        """Elevated roles need explicit permission."""
        plain = UserService.register(self.store, "a@example.com", TEST_PASSWORD, role="admin")
        elevated = UserService.register(
            self.store, "b@example.com", TEST_PASSWORD, role="organizer", allow_elevated=True
        )
        self.assertEqual(plain.role, "user")
        self.assertEqual(elevated.role, "organizer")

    def test_authenticate(self) -> None:
        """Good credentials return the user and bad ones raise."""
        user = UserService.register(self.store, "bob@example.com", TEST_PASSWORD)

        self.assertEqual(
            UserService.authenticate(self.store, "Bob@example.com", TEST_PASSWORD).id,
            user.id,
        )
        with self.assertRaises(NotAuthenticatedError):
            UserService.authenticate(self.store, "bob@example.com", "wrong-password")
        with self.assertRaises(NotAuthenticatedError):
            UserService.authenticate(self.store, "nobody@example.com", TEST_PASSWORD)


class AuthRoutesTestCase(ApiTestCase):
    """Tests for the /api/auth endpoints."""

    def test_register_logs_in(self) -> None:
        """Registration creates the account and starts a session."""
        response = self.client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": TEST_PASSWORD},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json["user"]["email"], "new@example.com")
        self.assertEqual(response.json["user"]["role"], "user")

        me = self.client.get("/api/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json["user"]["email"], "new@example.com")

    def test_register_short_password(self) -> None:
        """Passwords shorter than six characters are rejected."""
        response = self.client.post(
            "/api/auth/register", json={"email": "new@example.com", "password": "123"}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json["error"], "validation_failed")
        self.assertEqual(response.json["field"], "password")

    def test_register_invalid_email(self) -> None:
        """Emails need an @."""
        response = self.client.post(
            "/api/auth/register", json={"email": "nobody", "password": TEST_PASSWORD}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json["field"], "email")

    def test_register_duplicate(self) -> None:
        """A second account with the same email conflicts."""
        add_user(self.db, "u1", email="taken@example.com")

        response = self.client.post(
            "/api/auth/register",
            json={"email": "Taken@example.com", "password": TEST_PASSWORD},
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json["error"], "conflict")

    def test_register_elevated_when_allowed(self) -> None:
        """The role is honoured when elevated registration is enabled."""
        self.app.config["ALLOW_ELEVATED_REGISTRATION"] = True

        response = self.client.post(
            "/api/auth/register",
            json={"email": "org@example.com", "password": TEST_PASSWORD, "role": "organizer"},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json["user"]["role"], "organizer")

    def test_login_and_logout(self) -> None:
        """Login starts a session and logout ends it."""
        add_user(self.db, "u1", email="bob@example.com")

        response = self.client.post(
            "/api/auth/login", json={"email": "BOB@example.com", "password": TEST_PASSWORD}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json["user"]["id"], "u1")
        self.assertEqual(self.client.get("/api/auth/me").status_code, 200)

        self.assertEqual(self.client.post("/api/auth/logout").status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_login_invalid_credentials(self) -> None:
        """Wrong passwords are rejected without saying why."""
        add_user(self.db, "u1", email="bob@example.com")

        response = self.client.post(
            "/api/auth/login", json={"email": "bob@example.com", "password": "nope-nope"}
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json["error"], "not_authenticated")
        self.assertEqual(response.json["message"], "Invalid credentials")

    def test_me_requires_login(self) -> None:
        """Anonymous requests get 401."""
        response = self.client.get("/api/auth/me")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json["error"], "not_authenticated")

    def test_session_for_deleted_user(self) -> None:
        """A session pointing at a missing user is treated as anonymous."""
        with self.client.session_transaction() as sess:
            sess["user_id"] = "ghost"

        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_csrf_token(self) -> None:
        """JSON clients can fetch a CSRF token."""
        response = self.client.get("/api/auth/csrf")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json["csrfToken"])


if __name__ == "__main__":
    unittest.main()
