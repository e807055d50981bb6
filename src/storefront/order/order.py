"""Order aggregate: the record a checkout produces.

State Machine:
    pending → paid → shipped → completed
    pending → cancelled

Amounts are rounded to cents before they are stored. Two invariants hold for
every persisted order:
    total_amount   == Σ line.subtotal
    payment_amount == total_amount + shipping_fee - discount_amount
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderCompleted,
    OrderPaid,
    OrderPlaced,
    OrderShipped,
)
from storefront.shared.errors import ErrorKind, StorefrontError
from storefront.shared.money import ZERO, line_subtotal, to_decimal


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Copy of the buyer's address at the moment of checkout."""

    receiver_name: String(required=True, max_length=100)
    receiver_phone: String(required=True, max_length=20)
    province: String(required=True, max_length=50)
    city: String(required=True, max_length=50)
    district: String(required=True, max_length=50)
    street: String(required=True, max_length=200)
    detail_address: String(required=True, max_length=200)
    postal_code: String(max_length=10)


@storefront.value_object(part_of="Order")
class ProductSnapshot:
    """What the product looked like when it was bought."""

    name: String(required=True, max_length=200)
    slug: String(max_length=200)
    image: String(max_length=500)
    sku: String(max_length=100)
    variant_name: String(max_length=100)
    attributes: Text()  # JSON object


@storefront.entity(part_of="Order")
class OrderLine:
    product_id: Identifier()
    variant_id: Identifier()
    product_snapshot: ValueObject(ProductSnapshot, required=True)
    price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=1)
    subtotal: Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    order_no: String(required=True, max_length=20, unique=True)
    user_id: Identifier(required=True)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status: String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    total_amount: Float(required=True, min_value=0.0)
    discount_amount: Float(default=0.0, min_value=0.0)
    shipping_fee: Float(default=0.0, min_value=0.0)
    payment_amount: Float(required=True, min_value=0.0)
    shipping_address: ValueObject(ShippingAddress, required=True)
    buyer_message: String(max_length=500)
    lines: HasMany(OrderLine)
    shipping_company: String(max_length=100)
    tracking_number: String(max_length=100)
    shipped_by: Identifier()
    cancellation_reason: String(max_length=500)
    paid_at: DateTime()
    shipped_at: DateTime()
    completed_at: DateTime()
    cancelled_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def total_must_equal_sum_of_line_subtotals(self):
        if not self.lines:
            return
        line_sum = sum((to_decimal(line.subtotal) for line in self.lines), ZERO)
        if line_sum != to_decimal(self.total_amount):
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match line subtotals {line_sum}"]}
            )

    @invariant.post
    def payment_amount_must_add_up(self):
        if self.total_amount is None or self.payment_amount is None:
            return
        expected = (
            to_decimal(self.total_amount) + to_decimal(self.shipping_fee or 0) - to_decimal(self.discount_amount or 0)
        )
        if to_decimal(self.payment_amount) != expected:
            raise ValidationError({"payment_amount": [f"Payment amount must be {expected}"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_no,
        user_id,
        shipping_address: dict,
        lines: list[dict],
        shipping_fee,
        discount_amount=ZERO,
        buyer_message=None,
    ):
        """Build a pending order from priced lines.

        Each line dict carries ``product_id``, ``variant_id``, ``price``,
        ``quantity`` and a ``snapshot`` dict.
        """
        if not lines:
            raise StorefrontError(ErrorKind.EMPTY_CART)

        order_lines = []
        total = ZERO
        for line in lines:
            subtotal = line_subtotal(line["price"], line["quantity"])
            total += subtotal
            snapshot = dict(line["snapshot"])
            attributes = snapshot.get("attributes")
            if attributes is not None and not isinstance(attributes, str):
                snapshot["attributes"] = json.dumps(attributes)
            order_lines.append(
                OrderLine(
                    product_id=line["product_id"],
                    variant_id=line.get("variant_id"),
                    product_snapshot=ProductSnapshot(**snapshot),
                    price=float(to_decimal(line["price"])),
                    quantity=line["quantity"],
                    subtotal=float(subtotal),
                )
            )

        shipping = to_decimal(shipping_fee)
        discount = to_decimal(discount_amount)
        payment = total + shipping - discount
        now = datetime.now(UTC)

        order = cls(
            order_no=order_no,
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.UNPAID.value,
            total_amount=float(total),
            shipping_fee=float(shipping),
            discount_amount=float(discount),
            payment_amount=float(payment),
            shipping_address=ShippingAddress(**shipping_address),
            buyer_message=buyer_message,
            lines=order_lines,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_no=order_no,
                user_id=str(user_id),
                total_amount=order.total_amount,
                shipping_fee=order.shipping_fee,
                discount_amount=order.discount_amount,
                payment_amount=order.payment_amount,
                line_count=len(order_lines),
                items=json.dumps(
                    [
                        {
                            "product_id": str(ol.product_id),
                            "variant_id": str(ol.variant_id) if ol.variant_id else None,
                            "quantity": ol.quantity,
                            "price": ol.price,
                        }
                        for ol in order_lines
                    ]
                ),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise StorefrontError(
                ErrorKind.INVALID_STATUS,
                f"Cannot move order {self.order_no} from {current.value} to {target_status.value}",
                order_id=str(self.id),
                status=current.value,
            )

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    def cancel(self, reason=None):
        self.assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_no=self.order_no,
                user_id=str(self.user_id),
                reason=reason,
                cancelled_at=now,
            )
        )

    def mark_paid(self):
        self.assert_can_transition(OrderStatus.PAID)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.status = OrderStatus.PAID.value
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_no=self.order_no,
                amount=self.payment_amount,
                paid_at=now,
            )
        )

    def ship(self, shipped_by, shipping_company, tracking_number):
        self.assert_can_transition(OrderStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.shipping_company = shipping_company
        self.tracking_number = tracking_number
        self.shipped_by = shipped_by
        self.shipped_at = now
        self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                order_no=self.order_no,
                shipped_by=str(shipped_by),
                shipping_company=shipping_company,
                tracking_number=tracking_number,
                shipped_at=now,
            )
        )

    def complete(self):
        self.assert_can_transition(OrderStatus.COMPLETED)

        now = datetime.now(UTC)
        self.status = OrderStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now

        self.raise_(OrderCompleted(order_id=str(self.id), order_no=self.order_no, completed_at=now))
