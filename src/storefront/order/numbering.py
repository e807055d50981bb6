"""Order number generation: ``YYYYMMDD`` followed by six random digits."""

import secrets
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.shared.errors import ConcurrencyConflict

logger = structlog.get_logger(__name__)


class OrderNumberGenerator:
    def __init__(self, max_attempts: int = 5) -> None:
        self.max_attempts = max_attempts

    def _candidate(self) -> str:
        return f"{datetime.now(UTC):%Y%m%d}{secrets.randbelow(1_000_000):06d}"

    def next_order_no(self) -> str:
        """Draw numbers until one is not taken.

        The unique constraint on ``Order.order_no`` still guards against two
        writers drawing the same number at once.
        """
        repo = current_domain.repository_for(Order)
        for _ in range(self.max_attempts):
            candidate = self._candidate()
            if repo.find_by_order_no(candidate) is None:
                return candidate
            logger.info("Order number collision, drawing again", order_no=candidate)
        raise ConcurrencyConflict("order number generation", self.max_attempts)
