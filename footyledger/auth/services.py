"""Service layer for user accounts."""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

from werkzeug.security import check_password_hash, generate_password_hash

from footyledger.constants import (
    CREATED_AT,
    ELEVATED_ROLES,
    ROLE_USER,
    USER_EMAIL,
    USER_PASSWORD_HASH,
    USER_ROLE,
    USERS_COLLECTION,
)
from footyledger.errors import (
    DuplicateResourceError,
    NotAuthenticatedError,
    ValidationError,
)
from footyledger.user.models import Principal

if TYPE_CHECKING:
    from footyledger.store import DocumentStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    """Handles registration and authentication of users."""

    @staticmethod
    def normalize_email(email: str | None) -> str:
        """Trim and lower-case an email address."""
        return str(email or "").strip().lower()

    @staticmethod
    def find_by_email(store: DocumentStore, email: str) -> Principal | None:
        """Look a user up by normalized email."""
        users = store.find_many(USERS_COLLECTION, [(USER_EMAIL, "==", email)], limit=1)
        if not users:
            return None
        user = users[0]
        user["uid"] = user.pop("id")
        return Principal(user)

    @staticmethod
    def register(
        store: DocumentStore,
        email: str,
        password: str,
        role: str | None = None,
        allow_elevated: bool = False,
    ) -> Principal:
        """Create an account and return it as a principal.

        Elevated roles are only granted when ``allow_elevated`` is set;
        otherwise every new account is a plain user.
        """
        email = UserService.normalize_email(email)
        if "@" not in email:
            raise ValidationError(USER_EMAIL, "invalid", "Invalid email address.")
        if UserService.find_by_email(store, email) is not None:
            raise DuplicateResourceError("Email already exists")

        safe_role = role if allow_elevated and role in ELEVATED_ROLES else ROLE_USER
        user_id = store.insert(
            USERS_COLLECTION,
            {
                USER_EMAIL: email,
                USER_PASSWORD_HASH: generate_password_hash(str(password)),
                USER_ROLE: safe_role,
                CREATED_AT: datetime.datetime.now(datetime.timezone.utc),
            },
        )
        logger.info(f"User {user_id} registered with role {safe_role}")
        return Principal({"uid": user_id, USER_EMAIL: email, USER_ROLE: safe_role})

    @staticmethod
    def authenticate(store: DocumentStore, email: str, password: str) -> Principal:
        """Return the user with these credentials or raise."""
        user = UserService.find_by_email(store, UserService.normalize_email(email))
        if user is None or not check_password_hash(
            user.get(USER_PASSWORD_HASH) or "", str(password)
        ):
            logger.warning("Failed login attempt")
            raise NotAuthenticatedError(INVALID_CREDENTIALS)
        return user
