"""
This script creates an organizer account so a fresh deployment has someone
who can manage every tournament.

Credentials come from the command line, falling back to the SEED_EMAIL,
SEED_PASSWORD and SEED_ROLE environment variables. An existing account with
the same email is left untouched.
"""

import argparse
import os
import sys
from pathlib import Path

# Add the project root to the Python path to allow importing 'footyledger'
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from footyledger import create_app, get_store  # noqa: E402
from footyledger.auth.services import UserService  # noqa: E402
from footyledger.constants import ELEVATED_ROLES, ROLE_ORGANIZER  # noqa: E402
from footyledger.errors import DuplicateResourceError  # noqa: E402


def parse_args(argv=None):
    """Read the account to create."""
    parser = argparse.ArgumentParser(description="Create an organizer account.")
    parser.add_argument("--email", default=os.environ.get("SEED_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("SEED_PASSWORD"))
    parser.add_argument(
        "--role",
        default=os.environ.get("SEED_ROLE", ROLE_ORGANIZER),
        choices=sorted(ELEVATED_ROLES),
    )
    args = parser.parse_args(argv)
    if not args.email or not args.password:
        parser.error("an email and a password are required")
    return args


def seed_user(store, email, password, role):
    """Create the account unless the email is already registered.

    Returns True when a new account was created.
    """
    try:
        user = UserService.register(
            store, email, password, role=role, allow_elevated=True
        )
    except DuplicateResourceError:
        print(f"User already exists: {UserService.normalize_email(email)}")
        return False
    print(f"Seeded user {user.id}: {user.get('email')} ({user.role})")
    return True


def main(argv=None):
    """Create the account against the configured Firestore project."""
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        seed_user(get_store(), args.email, args.password, args.role)


if __name__ == "__main__":
    main()
