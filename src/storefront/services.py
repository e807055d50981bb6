"""Composition root for the storefront's application services.

``build_services`` is called once per process. The returned components share
one ``StockLocks`` registry, which is what serializes concurrent checkouts,
cancellations and manual stock adjustments on the same product.
"""

from dataclasses import dataclass

from protean.domain import Domain

from storefront.account.directory import UserDirectory
from storefront.catalogue.stock import ProductStockStore
from storefront.checkout.checkout import CheckoutService
from storefront.checkout.lifecycle import OrderLifecycle
from storefront.checkout.locking import StockLocks
from storefront.checkout.pricing import ShippingPolicy
from storefront.domain import storefront
from storefront.order.numbering import OrderNumberGenerator

DEFAULT_CHECKOUT_MAX_ATTEMPTS = 3
DEFAULT_ORDER_NO_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class StorefrontServices:
    directory: UserDirectory
    stock: ProductStockStore
    checkout: CheckoutService
    lifecycle: OrderLifecycle
    locks: StockLocks


def build_services(domain: Domain = storefront) -> StorefrontServices:
    custom = domain.config.get("custom") or {}
    max_attempts = int(custom.get("CHECKOUT_MAX_ATTEMPTS", DEFAULT_CHECKOUT_MAX_ATTEMPTS))

    locks = StockLocks()
    directory = UserDirectory()
    stock = ProductStockStore(locks)

    return StorefrontServices(
        directory=directory,
        stock=stock,
        checkout=CheckoutService(
            directory=directory,
            stock=stock,
            order_numbers=OrderNumberGenerator(
                max_attempts=int(custom.get("ORDER_NO_MAX_ATTEMPTS", DEFAULT_ORDER_NO_MAX_ATTEMPTS))
            ),
            locks=locks,
            shipping=ShippingPolicy.from_config(custom),
            max_attempts=max_attempts,
        ),
        lifecycle=OrderLifecycle(
            directory=directory,
            stock=stock,
            locks=locks,
            max_attempts=max_attempts,
        ),
        locks=locks,
    )
