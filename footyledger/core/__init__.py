"""Core module for the footyledger application."""

from .ids import is_valid_id, normalize_id
from .types import FirestoreDocument

__all__ = ["FirestoreDocument", "is_valid_id", "normalize_id"]
