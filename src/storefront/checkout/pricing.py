"""Order pricing: line subtotals, totals and the shipping fee."""

from dataclasses import dataclass, field
from decimal import Decimal

from storefront.shared.money import ZERO, line_subtotal, to_decimal

DEFAULT_FREE_SHIPPING_THRESHOLD = 99
DEFAULT_FLAT_SHIPPING_FEE = 10


@dataclass(frozen=True)
class ShippingPolicy:
    """Free shipping from ``free_shipping_threshold``; a flat fee below it."""

    free_shipping_threshold: Decimal = to_decimal(DEFAULT_FREE_SHIPPING_THRESHOLD)
    flat_fee: Decimal = to_decimal(DEFAULT_FLAT_SHIPPING_FEE)

    @classmethod
    def from_config(cls, custom: dict) -> "ShippingPolicy":
        return cls(
            free_shipping_threshold=to_decimal(custom.get("FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD)),
            flat_fee=to_decimal(custom.get("FLAT_SHIPPING_FEE", DEFAULT_FLAT_SHIPPING_FEE)),
        )

    def fee_for(self, total_amount: Decimal) -> Decimal:
        if total_amount >= self.free_shipping_threshold:
            return ZERO
        return self.flat_fee


@dataclass(frozen=True)
class PricedLine:
    line_id: str
    product_id: str
    variant_id: str | None
    price: Decimal
    quantity: int
    snapshot: dict = field(default_factory=dict)

    @property
    def subtotal(self) -> Decimal:
        return line_subtotal(self.price, self.quantity)

    def as_order_line(self) -> dict:
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "price": self.price,
            "quantity": self.quantity,
            "snapshot": self.snapshot,
        }


@dataclass(frozen=True)
class OrderQuote:
    lines: list[PricedLine]
    total_amount: Decimal
    shipping_fee: Decimal
    discount_amount: Decimal
    payment_amount: Decimal


def quote_order(lines: list[PricedLine], policy: ShippingPolicy) -> OrderQuote:
    """Price a set of lines. Promotions are not applied, so the discount is zero."""
    total = sum((line.subtotal for line in lines), ZERO)
    shipping = policy.fee_for(total)
    discount = ZERO
    return OrderQuote(
        lines=list(lines),
        total_amount=total,
        shipping_fee=shipping,
        discount_amount=discount,
        payment_amount=total + shipping - discount,
    )
