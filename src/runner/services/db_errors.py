from __future__ import annotations

import asyncpg
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

_DISCONNECT_MARKERS: tuple[str, ...] = (
    "connection is closed",
    "connection was closed",
    "connection does not exist",
    "connection refused",
    "connect call failed",
    "no address associated with hostname",
    "the database system is starting up",
    "closed in the middle of operation",
)


def _looks_like_disconnect(exc: BaseException) -> bool:
    msg = str(exc).lower()
    return any(marker in msg for marker in _DISCONNECT_MARKERS)


def is_db_disconnect(exc: BaseException) -> bool:
    """True if the temp-storage connection is gone (rollback is pointless then)."""
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and getattr(exc, "connection_invalidated", False):
        return True

    # asyncpg / OS-level, possibly wrapped by SQLAlchemy
    orig = getattr(exc, "orig", None)
    if isinstance(exc, (asyncpg.PostgresError, OSError)) or orig is not None:
        return _looks_like_disconnect(exc)

    return "no address associated with hostname" in str(exc).lower()
