# Overview: Service-layer operations for concurrency; row locks and caller-side retry.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError

from ..extensions import db
from homestock.errors import AutoNumberConflict


logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (OperationalError, AutoNumberConflict)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on=RETRYABLE_ERRORS):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and AutoNumberConflict
    (two creations computed the same auto number). func must redo its reads,
    so a retry sees the sibling that won the race.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning("Retrying after %s (attempt %d of %d)", type(exc).__name__, attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
