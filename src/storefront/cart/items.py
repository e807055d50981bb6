"""Cart line management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import ErrorKind, StorefrontError


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class ToggleCartLineSelection:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    is_selected = Boolean(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def _ensure_purchasable(product_id, variant_id):
    """Products must exist and be published; a variant must belong to its product."""
    products = current_domain.repository_for(Product)
    product = products.get(product_id)
    if not product.is_published:
        raise StorefrontError(
            ErrorKind.PRODUCT_UNAVAILABLE,
            f"Product {product.name} is not available",
            product_id=str(product_id),
        )
    if variant_id and product.find_variant(variant_id) is None:
        raise StorefrontError(
            ErrorKind.NOT_FOUND,
            f"Variant {variant_id} does not belong to product {product.name}",
            product_id=str(product_id),
            variant_id=str(variant_id),
        )


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    def _cart_of(self, user_id) -> Cart:
        cart = current_domain.repository_for(Cart).find_for_user(user_id)
        if cart is None:
            raise StorefrontError(ErrorKind.NOT_FOUND, "Cart is empty", user_id=str(user_id))
        return cart

    @handle(AddToCart)
    def add_to_cart(self, command):
        _ensure_purchasable(command.product_id, command.variant_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create_for_user(command.user_id)
        line = cart.add_line(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity or 1,
        )
        repo.add(cart)
        return str(line.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = self._cart_of(command.user_id)
        cart.update_quantity(command.line_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(ToggleCartLineSelection)
    def toggle_selection(self, command):
        cart = self._cart_of(command.user_id)
        cart.toggle_selected(command.line_id, command.is_selected)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = self._cart_of(command.user_id)
        cart.remove_line(command.line_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = current_domain.repository_for(Cart).find_for_user(command.user_id)
        if cart is None:
            return
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
