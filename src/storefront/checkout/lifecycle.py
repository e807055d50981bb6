"""Order lifecycle: cancel, payment callback, ship, complete, and order reads."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.account.account import AccountRole
from storefront.account.directory import UserDirectory
from storefront.catalogue.stock import ProductStockStore
from storefront.checkout.locking import StockLocks
from storefront.checkout.transaction import run_locked
from storefront.order.order import Order, OrderStatus
from storefront.shared.errors import ErrorKind, StorefrontError

logger = structlog.get_logger(__name__)


def _order_key(order_id) -> str:
    return f"order:{order_id}"


class OrderLifecycle:
    def __init__(
        self,
        directory: UserDirectory,
        stock: ProductStockStore,
        locks: StockLocks,
        max_attempts: int = 3,
    ) -> None:
        self.directory = directory
        self.stock = stock
        self.locks = locks
        self.max_attempts = max_attempts

    @property
    def _orders(self):
        return current_domain.repository_for(Order)

    def _owned_order(self, order_id, user_id) -> Order:
        order = self._orders.find_for_user(order_id, user_id)
        if order is None:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Order {order_id} not found", order_id=str(order_id))
        return order

    def _order(self, order_id) -> Order:
        try:
            return self._orders.get(order_id)
        except ObjectNotFoundError:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Order {order_id} not found", order_id=str(order_id))

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def cancel_order(self, order_id, user_id, reason=None) -> Order:
        """Cancel a pending order and put its stock back, exactly once."""
        order = self._owned_order(order_id, user_id)
        # Re-checked under the lock
        order.assert_can_transition(OrderStatus.CANCELLED)

        product_ids = {str(line.product_id) for line in order.lines if line.product_id}

        def work():
            current = self._owned_order(order_id, user_id)
            current.cancel(reason)
            self._orders.add(current)

            for line in current.lines:
                if not line.product_id:
                    continue
                try:
                    self.stock.adjust_stock(
                        line.product_id,
                        line.quantity,
                        variant_id=line.variant_id,
                        reason="cancellation",
                    )
                except StorefrontError as exc:
                    if exc.kind is not ErrorKind.NOT_FOUND:
                        raise
                    logger.warning(
                        "Product no longer exists, skipping restock",
                        order_id=str(current.id),
                        product_id=str(line.product_id),
                        variant_id=str(line.variant_id) if line.variant_id else None,
                        quantity=line.quantity,
                    )
            return current

        order = run_locked(
            self.locks,
            [*product_ids, _order_key(order_id)],
            work,
            operation="cancel_order",
            max_attempts=self.max_attempts,
        )
        logger.info("Order cancelled", order_id=str(order.id), order_no=order.order_no, reason=reason)
        return order

    def handle_payment_success(self, order_no: str) -> Order:
        """Mark an order paid. Safe to call any number of times."""
        order = self._orders.find_by_order_no(order_no)
        if order is None:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Order {order_no} not found", order_no=order_no)
        if order.is_paid:
            logger.info("Payment already recorded", order_no=order_no)
            return order

        def work():
            current = self._orders.find_by_order_no(order_no)
            if current.is_paid:
                return current
            current.mark_paid()
            self._orders.add(current)
            logger.info("Order paid", order_id=str(current.id), order_no=order_no)
            return current

        return run_locked(
            self.locks,
            [_order_key(order.id)],
            work,
            operation="handle_payment_success",
            max_attempts=self.max_attempts,
        )

    def ship_order(self, order_id, seller_id, shipping_company, tracking_number) -> Order:
        """Ship a paid order. Admins may ship any order; sellers only their own products."""
        actor = self.directory.resolve_user(seller_id)
        order = self._order(order_id)
        self._assert_can_ship(actor, order)

        def work():
            current = self._order(order_id)
            current.ship(
                shipped_by=str(actor.id),
                shipping_company=shipping_company,
                tracking_number=tracking_number,
            )
            self._orders.add(current)
            return current

        order = run_locked(
            self.locks,
            [_order_key(order_id)],
            work,
            operation="ship_order",
            max_attempts=self.max_attempts,
        )
        logger.info(
            "Order shipped",
            order_id=str(order.id),
            order_no=order.order_no,
            shipped_by=str(actor.id),
            shipping_company=shipping_company,
        )
        return order

    def _assert_can_ship(self, actor, order: Order) -> None:
        if actor.is_admin:
            return
        if actor.role != AccountRole.SELLER.value:
            raise StorefrontError(ErrorKind.FORBIDDEN, "Only sellers and admins can ship orders", order_id=str(order.id))

        for line in order.lines:
            quote = self.stock.get_price_and_stock(line.product_id) if line.product_id else None
            if quote is None or quote.seller_id != str(actor.id):
                raise StorefrontError(
                    ErrorKind.FORBIDDEN,
                    "Order contains products of another seller",
                    order_id=str(order.id),
                    product_id=str(line.product_id) if line.product_id else None,
                )

    def complete_order(self, order_id, user_id) -> Order:
        """Buyer confirms receipt of a shipped order."""
        self._owned_order(order_id, user_id)

        def work():
            current = self._owned_order(order_id, user_id)
            current.complete()
            self._orders.add(current)
            return current

        order = run_locked(
            self.locks,
            [_order_key(order_id)],
            work,
            operation="complete_order",
            max_attempts=self.max_attempts,
        )
        logger.info("Order completed", order_id=str(order.id), order_no=order.order_no)
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order_detail(self, order_id, user_id) -> Order:
        return self._owned_order(order_id, user_id)

    def list_user_orders(self, user_id, status=None, page: int = 1, page_size: int = 20):
        """Return ``(orders, total)`` for one page of the user's orders, newest first."""
        if status is not None and status not in {s.value for s in OrderStatus}:
            raise StorefrontError(ErrorKind.INVALID_STATUS, f"Unknown order status {status}", status=status)
        return self._orders.list_for_user(user_id, status=status, page=page, page_size=page_size)
