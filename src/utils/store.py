"""Shared error types for the SQLite-backed stores."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Exception raised when a store read or write fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class RecordNotFoundError(StoreError):
    """Raised when a row does not exist for the given owner."""


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Wrap sqlite3 errors raised while performing ``action`` in StoreError."""
    try:
        yield
    except sqlite3.Error as e:
        logger.error("Store operation failed (%s): %s", action, e)
        raise StoreError(f"Failed to {action}", e) from e
