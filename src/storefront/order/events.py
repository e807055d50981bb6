"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout committed: order, lines, stock decrements and cart cleanup."""

    __version__ = 1

    order_id: Identifier(required=True)
    order_no: String(required=True)
    user_id: Identifier(required=True)
    total_amount: Float(required=True)
    shipping_fee: Float(required=True)
    discount_amount: Float(required=True)
    payment_amount: Float(required=True)
    line_count: Integer(required=True)
    items: Text(required=True)  # JSON: [{product_id, variant_id, quantity, price}]
    placed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id: Identifier(required=True)
    order_no: String(required=True)
    user_id: Identifier(required=True)
    reason: String()
    cancelled_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id: Identifier(required=True)
    order_no: String(required=True)
    amount: Float(required=True)
    paid_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id: Identifier(required=True)
    order_no: String(required=True)
    shipped_by: Identifier(required=True)
    shipping_company: String(required=True)
    tracking_number: String(required=True)
    shipped_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCompleted:
    __version__ = 1

    order_id: Identifier(required=True)
    order_no: String(required=True)
    completed_at: DateTime(required=True)
