"""Low-stock alerting on stock adjustments."""

import structlog
from protean.utils.mixins import handle

from storefront.catalogue.events import StockAdjusted
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Product)
class LowStockAlerts:
    """Warns when a counter ends at or below the product's threshold."""

    @handle(StockAdjusted)
    def on_stock_adjusted(self, event: StockAdjusted) -> None:
        if event.new_stock > event.low_stock_threshold:
            return

        logger.warning(
            "Stock at or below threshold",
            product_id=str(event.product_id),
            variant_id=str(event.variant_id) if event.variant_id else None,
            stock=event.new_stock,
            threshold=event.low_stock_threshold,
        )
