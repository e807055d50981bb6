"""ProductStockStore: price/stock lookup and the single stock mutation path."""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.checkout.locking import StockLocks
from storefront.shared.errors import ErrorKind, StorefrontError
from storefront.shared.money import to_decimal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockQuote:
    """Authoritative price and stock for one (product, variant) reference."""

    product_id: str
    variant_id: str | None
    price: Decimal | None
    stock: int | None
    is_published: bool
    seller_id: str | None = None
    snapshot: dict = field(default_factory=dict)


class ProductStockStore:
    """Reads and adjusts product and variant stock counters.

    ``adjust_stock`` is the only code path allowed to change a counter. It
    holds the product's lock while reading and writing.
    """

    def __init__(self, locks: StockLocks) -> None:
        self.locks = locks

    def _load(self, product_id) -> Product | None:
        try:
            return current_domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            return None

    def get_price_and_stock(self, product_id, variant_id=None) -> StockQuote | None:
        product = self._load(product_id)
        if product is None:
            return None

        snapshot = {
            "name": product.name,
            "slug": product.slug,
            "image": product.first_image,
            "sku": product.sku,
            "variant_name": None,
            "attributes": None,
        }

        if variant_id:
            variant = product.find_variant(variant_id)
            if variant is None:
                return None
            # Variants without their own price sell at the product price
            price = variant.price if variant.price is not None else product.price
            stock = variant.stock
            snapshot.update(
                sku=variant.sku or variant.name,
                variant_name=variant.name,
                attributes=variant.attributes,
            )
        else:
            price = product.price
            stock = product.stock

        return StockQuote(
            product_id=str(product.id),
            variant_id=str(variant_id) if variant_id else None,
            price=to_decimal(price) if price is not None else None,
            stock=stock,
            is_published=bool(product.is_published),
            seller_id=str(product.seller_id) if product.seller_id else None,
            snapshot=snapshot,
        )

    def adjust_stock(self, product_id, delta: int, variant_id=None, reason=None) -> int:
        """Apply ``stock += delta`` to one counter and return the new level.

        Joins the caller's unit of work when one is active.
        """
        with self.locks.hold([product_id]):
            repo = current_domain.repository_for(Product)
            product = self._load(product_id)
            if product is None:
                raise StorefrontError(
                    ErrorKind.NOT_FOUND,
                    f"Product {product_id} not found",
                    product_id=str(product_id),
                )

            new_stock = product.adjust_stock(delta, variant_id=variant_id, reason=reason)
            repo.add(product)

            logger.info(
                "Stock adjusted",
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                delta=delta,
                new_stock=new_stock,
                reason=reason,
            )
            return new_stock

    def manual_adjustment(self, product_id, delta: int, actor, variant_id=None) -> int:
        """Seller or admin correction of a counter, in its own unit of work."""
        quote = self.get_price_and_stock(product_id)
        if quote is None:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Product {product_id} not found", product_id=str(product_id))
        if not actor.is_admin and quote.seller_id != str(actor.id):
            raise StorefrontError(
                ErrorKind.FORBIDDEN,
                "Only the owning seller can adjust this product's stock",
                product_id=str(product_id),
                actor_id=str(actor.id),
            )

        with self.locks.hold([product_id]):
            with UnitOfWork():
                return self.adjust_stock(product_id, delta, variant_id=variant_id, reason="manual")
