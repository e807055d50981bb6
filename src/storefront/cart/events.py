"""Domain events for the Cart aggregate."""

from protean.fields import Boolean, Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartLineAdded:
    """A product was put into the cart, or its quantity was merged into an existing line."""

    __version__ = 1

    cart_id: Identifier(required=True)
    user_id: Identifier(required=True)
    line_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_id: Identifier()
    quantity: Integer(required=True)
    line_quantity: Integer(required=True)


@storefront.event(part_of="Cart")
class CartLineQuantityUpdated:
    __version__ = 1

    cart_id: Identifier(required=True)
    line_id: Identifier(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)


@storefront.event(part_of="Cart")
class CartLineSelectionChanged:
    __version__ = 1

    cart_id: Identifier(required=True)
    line_id: Identifier(required=True)
    is_selected: Boolean(required=True)


@storefront.event(part_of="Cart")
class CartLineRemoved:
    __version__ = 1

    cart_id: Identifier(required=True)
    line_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_id: Identifier()


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id: Identifier(required=True)
    lines_removed: Integer(required=True)
