"""Commit helper for the single-writer SQLite database.

Exam completion, reviews and backup imports each end in one commit. A
concurrent writer (a second tab, the dev reloader) can briefly hold the
SQLite lock, so :func:`safe_commit` backs off and retries lock errors only.
Every other failure reaches the caller, which rolls back.
"""

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.session import Session

logger = logging.getLogger(__name__)

LOCK_ERROR_MARKERS = ("database is locked", "database is busy")


def _is_lock_error(error: OperationalError) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in LOCK_ERROR_MARKERS)


def safe_commit(
    session: Session,
    retries: int = 5,
    initial_delay: float = 0.1,
) -> None:
    """Commit ``session``, retrying while SQLite reports a lock.

    The wait doubles after each locked attempt, starting at
    ``initial_delay`` seconds. After ``retries`` attempts, or on any
    OperationalError that is not a lock, the error is re-raised.
    """

    delay = initial_delay
    for attempt in range(1, retries + 1):
        try:
            session.commit()
            return
        except OperationalError as exc:  # pragma: no cover - needs a second writer
            session.rollback()
            if attempt == retries or not _is_lock_error(exc):
                raise
            logger.warning("Database locked on commit, retry %d of %d in %.1fs", attempt, retries - 1, delay)
            time.sleep(delay)
            delay *= 2
