"""Mock utilities for Firestore."""

from __future__ import annotations

import unittest.mock
from typing import Any, Optional

from google.api_core import exceptions as google_exceptions
from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference
from werkzeug.security import generate_password_hash

from footyledger.constants import (
    ROLE_USER,
    USER_EMAIL,
    USER_PASSWORD_HASH,
    USER_ROLE,
    USERS_COLLECTION,
)
from footyledger.store import DocumentStore
from footyledger.user.models import Principal

TEST_PASSWORD = "secret123"  # nosec


class MockFirestoreBuilder:
    """Builder to modularize mockfirestore patching."""

    @staticmethod
    def patch_db_read() -> None:
        """Apply monkeypatches to mockfirestore to support FieldFilter and equality."""

        def collection_where(
            self: Any,
            field_path: Optional[str] = None,
            op_string: Optional[str] = None,
            value: Any = None,
            filter: Any = None,
        ) -> Any:
            if filter:
                return self._where(filter.field_path, filter.op_string, filter.value)
            return self._where(field_path, op_string, value)

        if not hasattr(CollectionReference, "_where"):
            CollectionReference._where = CollectionReference.where
            CollectionReference.where = collection_where

        def query_where(
            self: Any,
            field_path: Optional[str] = None,
            op_string: Optional[str] = None,
            value: Any = None,
            filter: Any = None,
        ) -> Any:
            if filter:
                return self._where(filter.field_path, filter.op_string, filter.value)
            return self._where(field_path, op_string, value)

        if not hasattr(Query, "_where"):
            Query._where = Query.where
            Query.where = query_where

        def doc_ref_eq(self: Any, other: Any) -> bool:
            if not isinstance(other, DocumentReference):
                return False
            return self._path == other._path

        if not hasattr(DocumentReference, "_orig_eq"):
            DocumentReference._orig_eq = DocumentReference.__eq__
            DocumentReference.__eq__ = doc_ref_eq

        # Patch DocumentReference.get to handle transaction argument
        if not hasattr(DocumentReference, "_orig_get"):
            DocumentReference._orig_get = DocumentReference.get

            def doc_ref_get(self: Any, transaction: Any = None) -> Any:
                """Handle transaction argument in get."""
                return self._orig_get()

            DocumentReference.get = doc_ref_get

    @staticmethod
    def build() -> MockFirestore:
        """Return a fresh, patched in-memory Firestore."""
        MockFirestoreBuilder.patch_db_read()
        return MockFirestore()

    @staticmethod
    def build_unavailable() -> unittest.mock.MagicMock:
        """Return a client whose every call fails like an unreachable backend."""
        client = unittest.mock.MagicMock()
        client.collection.side_effect = google_exceptions.ServiceUnavailable(
            "backend unreachable"
        )
        return client


def make_store(db: Any = None) -> DocumentStore:
    """Wrap a (new) mock Firestore in a document store."""
    return DocumentStore(db if db is not None else MockFirestoreBuilder.build())


def add_user(
    db: Any,
    uid: str,
    role: str = ROLE_USER,
    email: Optional[str] = None,
    password: str = TEST_PASSWORD,
) -> Principal:
    """Store a user document and return the matching principal."""
    email = email or f"{uid}@example.com"
    data = {
        USER_EMAIL: email,
        USER_PASSWORD_HASH: generate_password_hash(password),
        USER_ROLE: role,
    }
    db.collection(USERS_COLLECTION).document(uid).set(data)
    return Principal({"uid": uid, USER_EMAIL: email, USER_ROLE: role})


class ApiTestCase(unittest.TestCase):
    """Base case running the app against an in-memory Firestore."""

    def setUp(self) -> None:
        """Set up a test client backed by mockfirestore."""
        from footyledger import create_app

        self.db = MockFirestoreBuilder.build()
        self.app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False, "SERVER_NAME": "localhost"},
            db=self.db,
        )
        self.store = self.app.extensions["document_store"]
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self) -> None:
        """Tear down the app context."""
        self.app_context.pop()

    def login_as(self, user: Principal) -> None:
        """Put the user in the session."""
        with self.client.session_transaction() as sess:
            sess["user_id"] = user.id
