"""Tests for the JSON error handlers."""

from __future__ import annotations

import unittest

from footyledger import create_app
from footyledger.errors import (
    DuplicateResourceError,
    ForbiddenError,
    InvalidIdentifierError,
    NotAuthenticatedError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from tests.mock_utils import TEST_PASSWORD, ApiTestCase, MockFirestoreBuilder


class ErrorTaxonomyTestCase(unittest.TestCase):
    """Every error has a stable reason and status code."""

    def test_reasons_and_status_codes(self) -> None:
        """Check the reason and HTTP status of each error type."""
        expected = [
            (NotAuthenticatedError(), "not_authenticated", 401),
            (ForbiddenError(), "forbidden", 403),
            (NotFoundError(), "not_found", 404),
            (InvalidIdentifierError(), "invalid_identifier", 400),
            (ValidationError("date", "required"), "validation_failed", 400),
            (DuplicateResourceError(), "conflict", 409),
            (StoreUnavailableError(), "store_unavailable", 503),
        ]
        for error, reason, status_code in expected:
            with self.subTest(error=type(error).__name__):
                self.assertEqual(error.reason, reason)
                self.assertEqual(error.status_code, status_code)
                self.assertEqual(error.to_dict()["error"], reason)


class ErrorHandlersTestCase(ApiTestCase):
    """Tests for the error responses of the app."""

    def test_unknown_route(self) -> None:
        """Unknown routes return a JSON 404."""
        response = self.client.get("/api/nothing-here")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json["error"], "not_found")

    def test_method_not_allowed(self) -> None:
        """Wrong methods return a JSON 405."""
        response = self.client.delete("/api/auth/me")

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json["error"], "method_not_allowed")

    def test_unexpected_error_hides_details(self) -> None:
        """Unhandled exceptions become a generic 500."""

        def boom():
            raise RuntimeError("secret internals")

        self.app.add_url_rule("/api/boom", "boom", boom)

        response = self.client.get("/api/boom")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json["error"], "server_error")
        self.assertNotIn(b"secret internals", response.data)

    def test_version(self) -> None:
        """The version endpoint reports the configured version."""
        self.app.config["APP_VERSION"] = "1.2.3"

        response = self.client.get("/api/version")

        self.assertEqual(response.json, {"service": "footyledger", "version": "1.2.3"})


class StoreUnavailableTestCase(unittest.TestCase):
    """Tests for requests when Firestore cannot be reached."""

    def test_store_failure_returns_503(self) -> None:
        """Backend failures map to store_unavailable without internals."""
        app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False},
            db=MockFirestoreBuilder.build_unavailable(),
        )

        response = app.test_client().post(
            "/api/auth/login", json={"email": "a@example.com", "password": TEST_PASSWORD}
        )

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json["error"], "store_unavailable")
        self.assertNotIn(b"backend unreachable", response.data)


class CsrfTestCase(unittest.TestCase):
    """Tests for CSRF protection of JSON requests."""

    def test_missing_token_is_rejected(self) -> None:
        """State changing requests need the X-CSRFToken header."""
        app = create_app({"TESTING": True}, db=MockFirestoreBuilder.build())
        client = app.test_client()

        response = client.post("/api/auth/logout")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json["error"], "csrf_failed")

    def test_token_from_csrf_endpoint_is_accepted(self) -> None:
        """The token handed out by /api/auth/csrf passes the check."""
        app = create_app({"TESTING": True}, db=MockFirestoreBuilder.build())
        client = app.test_client()
        token = client.get("/api/auth/csrf").json["csrfToken"]

        response = client.post("/api/auth/logout", headers={"X-CSRFToken": token})

        self.assertEqual(response.status_code, 200)


if __name__ == "__main__":
    unittest.main()
