"""Typed errors raised by the connection pool.

SQLAlchemy and driver exceptions never leave ``athlete_base.db.pool``;
callers pattern-match on these types instead of on error text.
"""


class DatabaseError(Exception):
    """Base class for database failures."""


class UniqueViolationError(DatabaseError):
    """Raised when a write violates a unique constraint."""


class PoolTimeoutError(DatabaseError):
    """Raised when no connection could be acquired within the connection timeout."""
