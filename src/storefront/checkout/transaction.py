"""Locked, retried units of work shared by checkout and the order lifecycle."""

from collections.abc import Callable, Iterable
from typing import TypeVar

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError

from storefront.checkout.locking import StockLocks
from storefront.shared.errors import ConcurrencyConflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def run_locked(
    locks: StockLocks,
    keys: Iterable,
    work: Callable[[], T],
    operation: str,
    max_attempts: int = 3,
) -> T:
    """Run ``work`` inside one unit of work while holding the locks of ``keys``.

    The locks are taken before the unit of work starts and released after it
    commits or rolls back. A version conflict rolls the attempt back and runs
    ``work`` again; any other exception propagates after rollback.
    """
    keys = list(keys)
    for attempt in range(1, max_attempts + 1):
        try:
            with locks.hold(keys):
                with UnitOfWork():
                    return work()
        except ExpectedVersionError as exc:
            logger.warning(
                "Concurrent update detected, retrying",
                operation=operation,
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )

    logger.error("Retry budget exhausted", operation=operation, attempts=max_attempts)
    raise ConcurrencyConflict(operation, max_attempts)
