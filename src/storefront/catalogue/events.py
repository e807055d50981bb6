"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A seller listed a new product (unpublished until published)."""

    __version__ = 1

    product_id: Identifier(required=True)
    seller_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    name: String(required=True)
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class ProductPublished:
    __version__ = 1

    product_id: Identifier(required=True)
    published_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUnpublished:
    __version__ = 1

    product_id: Identifier(required=True)
    unpublished_at: DateTime(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """A stock counter changed by ``delta``.

    ``variant_id`` is empty when the product-level counter changed.
    """

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier()
    delta: Integer(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String(max_length=50)
    low_stock_threshold: Integer(required=True)
    adjusted_at: DateTime(required=True)
