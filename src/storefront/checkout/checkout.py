"""Checkout turns the selected cart lines into a pending order.

Everything from the stock check to the cart cleanup runs in one unit of work
while the locks of every product involved are held. A failure at any step
rolls back the order, its lines, the stock decrements and the cart changes
together.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.account.directory import UserDirectory
from storefront.cart.cart import Cart
from storefront.catalogue.stock import ProductStockStore
from storefront.checkout.locking import StockLocks
from storefront.checkout.pricing import PricedLine, ShippingPolicy, quote_order
from storefront.checkout.transaction import run_locked
from storefront.order.numbering import OrderNumberGenerator
from storefront.order.order import Order
from storefront.shared.errors import ErrorKind, StorefrontError

logger = structlog.get_logger(__name__)


class CheckoutService:
    def __init__(
        self,
        directory: UserDirectory,
        stock: ProductStockStore,
        order_numbers: OrderNumberGenerator,
        locks: StockLocks,
        shipping: ShippingPolicy,
        max_attempts: int = 3,
    ) -> None:
        self.directory = directory
        self.stock = stock
        self.order_numbers = order_numbers
        self.locks = locks
        self.shipping = shipping
        self.max_attempts = max_attempts

    def create_order_from_cart(self, user_id, address_id, buyer_message=None) -> Order:
        log = logger.bind(user_id=str(user_id))
        log.info("Checkout started", address_id=str(address_id) if address_id else None)

        self.directory.resolve_user(user_id)

        address = self.directory.find_owned_address(address_id, user_id)
        if address is None:
            log.info("Checkout rejected", kind=ErrorKind.INVALID_ADDRESS.code)
            raise StorefrontError(
                ErrorKind.INVALID_ADDRESS,
                f"Address {address_id} not found",
                address_id=str(address_id) if address_id else None,
            )
        shipping_address = address.snapshot()

        cart = current_domain.repository_for(Cart).find_for_user(user_id)
        selected = cart.selected_lines() if cart else []
        if not selected:
            log.info("Checkout rejected", kind=ErrorKind.EMPTY_CART.code)
            raise StorefrontError(ErrorKind.EMPTY_CART)

        line_ids = {str(line.id) for line in selected}
        product_ids = {str(line.product_id) for line in selected}

        order = run_locked(
            self.locks,
            product_ids,
            lambda: self._place_order(user_id, line_ids, shipping_address, buyer_message, log),
            operation="checkout",
            max_attempts=self.max_attempts,
        )

        log.info(
            "Order placed",
            order_id=str(order.id),
            order_no=order.order_no,
            payment_amount=order.payment_amount,
        )
        return order

    def _place_order(self, user_id, line_ids, shipping_address, buyer_message, log) -> Order:
        carts = current_domain.repository_for(Cart)
        cart = carts.find_for_user(user_id)

        # Only lines selected when the locks were chosen; anything added since is left alone
        lines = [line for line in (cart.lines if cart else []) if str(line.id) in line_ids and line.is_selected]
        if not lines:
            log.info("Checkout rejected", kind=ErrorKind.EMPTY_CART.code)
            raise StorefrontError(ErrorKind.EMPTY_CART)

        priced = [self._price_line(line, log) for line in lines]
        quote = quote_order(priced, self.shipping)

        order = Order.place(
            order_no=self.order_numbers.next_order_no(),
            user_id=user_id,
            shipping_address=shipping_address,
            lines=[p.as_order_line() for p in priced],
            shipping_fee=quote.shipping_fee,
            discount_amount=quote.discount_amount,
            buyer_message=buyer_message,
        )
        current_domain.repository_for(Order).add(order)

        for p in priced:
            self.stock.adjust_stock(p.product_id, -p.quantity, variant_id=p.variant_id, reason="checkout")

        for line in lines:
            cart.remove_line(line.id)
        carts.add(cart)

        return order

    def _price_line(self, line, log) -> PricedLine:
        quote = self.stock.get_price_and_stock(line.product_id, line.variant_id)
        context = {
            "product_id": str(line.product_id),
            "variant_id": str(line.variant_id) if line.variant_id else None,
        }

        if quote is None or quote.price is None or quote.stock is None:
            log.info("Checkout rejected", kind=ErrorKind.PRODUCT_UNAVAILABLE.code, **context)
            raise StorefrontError(
                ErrorKind.PRODUCT_UNAVAILABLE,
                f"Product {line.product_id} is unavailable",
                **context,
            )

        name = quote.snapshot.get("name")
        if quote.stock < line.quantity:
            log.info(
                "Checkout rejected",
                kind=ErrorKind.INSUFFICIENT_STOCK.code,
                available=quote.stock,
                requested=line.quantity,
                **context,
            )
            raise StorefrontError(
                ErrorKind.INSUFFICIENT_STOCK,
                f"Insufficient stock for product {name}: {quote.stock} available, {line.quantity} requested",
                available=quote.stock,
                requested=line.quantity,
                **context,
            )

        if not quote.is_published:
            log.info("Checkout rejected", kind=ErrorKind.PRODUCT_UNAVAILABLE.code, **context)
            raise StorefrontError(
                ErrorKind.PRODUCT_UNAVAILABLE,
                f"Product {name} is not available",
                **context,
            )

        return PricedLine(
            line_id=str(line.id),
            product_id=quote.product_id,
            variant_id=quote.variant_id,
            price=quote.price,
            quantity=line.quantity,
            snapshot=quote.snapshot,
        )
