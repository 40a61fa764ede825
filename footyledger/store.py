"""Document store adapter over a Firestore client.

The rest of the application talks to Firestore only through ``DocumentStore``,
which is created once by the app factory and handed to services explicitly.
Tests pass a ``mockfirestore.MockFirestore`` client instead of a real one.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from .errors import NotFoundError, StoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

logger = logging.getLogger(__name__)

# (field, operator, value) triples, e.g. ("tournamentId", "==", "abc").
Filter = tuple[str, str, Any]
# (field, descending) pairs, applied in order of precedence.
SortKey = tuple[str, bool]

Condition = Callable[[dict[str, Any]], bool]
Mutation = Callable[[dict[str, Any]], dict[str, Any]]


def _translate_errors(func):
    """Surface Firestore transport failures as application errors."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except google_exceptions.NotFound as e:
            raise NotFoundError() from e
        except (
            google_exceptions.GoogleAPICallError,
            google_exceptions.RetryError,
        ) as e:
            logger.error(f"Document store call '{func.__name__}' failed: {e}")
            raise StoreUnavailableError() from e

    return wrapper


def _sort_key(value: Any, descending: bool) -> tuple[bool, str, Any]:
    # Missing values sort last in either direction; mixed types never compare.
    if value is None:
        return (not descending, "", 0)
    return (descending, type(value).__name__, value)


def sort_documents(
    docs: list[dict[str, Any]], sort: Sequence[SortKey] | None
) -> list[dict[str, Any]]:
    """Sort documents in place by several keys and return them."""
    for field, descending in reversed(list(sort or [])):
        docs.sort(
            key=lambda d, f=field, desc=descending: _sort_key(d.get(f), desc),
            reverse=descending,
        )
    return docs


def project_documents(
    docs: list[dict[str, Any]], projection: Sequence[str] | None
) -> list[dict[str, Any]]:
    """Keep only the projected fields (and the id) of each document."""
    if not projection:
        return docs
    fields = set(projection) | {"id"}
    return [{k: v for k, v in d.items() if k in fields} for d in docs]


@firestore.transactional
def _conditional_update(
    transaction: Transaction,
    ref: DocumentReference,
    condition: Condition,
    mutation: Mutation,
) -> int:
    """Apply ``mutation`` to the document only if ``condition`` holds."""
    snapshot = ref.get(transaction=transaction)
    if not snapshot.exists:
        return 0
    data = snapshot.to_dict() or {}
    if not condition(data):
        return 0
    transaction.update(ref, mutation(data))
    return 1


class DocumentStore:
    """Key-ordered document collections addressed by id."""

    def __init__(self, client: Client) -> None:
        """Wrap a Firestore (or mock Firestore) client."""
        self.client = client

    def reference(self, collection: str, doc_id: str) -> DocumentReference:
        """Return a document reference, e.g. to match legacy typed owner fields."""
        return self.client.collection(collection).document(doc_id)

    @staticmethod
    def _to_document(snapshot: DocumentSnapshot) -> dict[str, Any] | None:
        data = snapshot.to_dict()
        if data is None:
            return None
        return {**data, "id": snapshot.id}

    def _query(self, collection: str, filters: Iterable[Filter] | None) -> Any:
        query = self.client.collection(collection)
        for field, op, value in filters or ():
            query = query.where(filter=firestore.FieldFilter(field, op, value))
        return query

    def _stream(
        self, collection: str, filters: Iterable[Filter] | None
    ) -> Iterator[DocumentSnapshot]:
        for snapshot in self._query(collection, filters).stream():
            if snapshot.exists:
                yield snapshot

    @_translate_errors
    def find_by_id(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch a single document, or None if it does not exist."""
        snapshot = self.reference(collection, doc_id).get()
        if not snapshot.exists:
            return None
        return self._to_document(snapshot)

    @_translate_errors
    def find_many(  # noqa: PLR0913
        self,
        collection: str,
        filters: Iterable[Filter] | None = None,
        sort: Sequence[SortKey] | None = None,
        projection: Sequence[str] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query a collection.

        Filters run in Firestore. Sorting, paging and projection run here so
        that documents missing the sort field are kept rather than dropped by
        the Firestore index.
        """
        docs = [
            doc
            for doc in map(self._to_document, self._stream(collection, filters))
            if doc is not None
        ]

        sort_documents(docs, sort)
        end = skip + limit if limit is not None else None
        return project_documents(docs[skip:end], projection)

    @_translate_errors
    def count(self, collection: str, filters: Iterable[Filter] | None = None) -> int:
        """Count the documents matching ``filters``."""
        return sum(1 for _ in self._stream(collection, filters))

    @_translate_errors
    def insert(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document and return its generated id."""
        ref = self.client.collection(collection).document()
        ref.set(data)
        return str(ref.id)

    @_translate_errors
    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> int:
        """Update fields of an existing document. Returns the matched count."""
        ref = self.reference(collection, doc_id)
        if not ref.get().exists:
            return 0
        ref.update(data)
        return 1

    @_translate_errors
    def update_one_conditional(
        self,
        collection: str,
        doc_id: str,
        condition: Condition,
        mutation: Mutation,
    ) -> int:
        """Atomically update a document if ``condition`` holds for its data.

        The check and the write run in one Firestore transaction. Returns the
        matched count (0 when the document is missing or the condition fails).
        """
        ref = self.reference(collection, doc_id)
        transaction = self.client.transaction()
        return _conditional_update(transaction, ref, condition, mutation)

    @_translate_errors
    def increment(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> dict[str, Any] | None:
        """Bump a counter and return the updated document.

        Best-effort read-modify-write: concurrent increments may be lost.
        """
        ref = self.reference(collection, doc_id)
        snapshot = ref.get()
        if not snapshot.exists:
            return None
        doc = self._to_document(snapshot) or {"id": doc_id}
        doc[field] = (doc.get(field) or 0) + amount
        ref.update({field: doc[field]})
        return doc

    @_translate_errors
    def delete_one(self, collection: str, doc_id: str) -> int:
        """Delete one document. Returns the deleted count."""
        ref = self.reference(collection, doc_id)
        if not ref.get().exists:
            return 0
        ref.delete()
        return 1

    @_translate_errors
    def delete_many(self, collection: str, filters: Iterable[Filter]) -> int:
        """Delete every document matching ``filters``. Returns the deleted count."""
        deleted = 0
        for snapshot in self._stream(collection, filters):
            self.reference(collection, snapshot.id).delete()
            deleted += 1
        return deleted
