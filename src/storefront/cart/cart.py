"""Cart aggregate: one per user, holding the lines a checkout consumes.

A line is keyed by (product_id, variant_id). Adding the same key again merges
the quantities; a line without a variant is a different key from any line
with one.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartLineAdded,
    CartLineQuantityUpdated,
    CartLineRemoved,
    CartLineSelectionChanged,
)
from storefront.domain import storefront
from storefront.shared.errors import ErrorKind, StorefrontError


def _line_key(product_id, variant_id):
    return str(product_id), str(variant_id) if variant_id else None


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    is_selected = Boolean(default=True)
    added_at = DateTime()
    updated_at = DateTime()

    @property
    def key(self):
        return _line_key(self.product_id, self.variant_id)


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def find_line(self, line_id):
        return next((line for line in self.lines if str(line.id) == str(line_id)), None)

    def _get_line(self, line_id):
        line = self.find_line(line_id)
        if line is None:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Cart line {line_id} not found", line_id=str(line_id))
        return line

    def selected_lines(self):
        return [line for line in self.lines if line.is_selected]

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product_id, quantity, variant_id=None):
        """Add a line, or merge ``quantity`` into the line with the same key."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        key = _line_key(product_id, variant_id)
        existing = next((line for line in self.lines if line.key == key), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            existing.updated_at = now
            line = existing
        else:
            line = CartLine(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                is_selected=True,
                added_at=now,
                updated_at=now,
            )
            self.add_lines(line)

        self.updated_at = now
        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                line_id=str(line.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                quantity=quantity,
                line_quantity=line.quantity,
            )
        )
        return line

    def update_quantity(self, line_id, quantity):
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        line = self._get_line(line_id)
        previous_quantity = line.quantity
        now = datetime.now(UTC)
        line.quantity = quantity
        line.updated_at = now
        self.updated_at = now

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=str(line.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def toggle_selected(self, line_id, is_selected):
        line = self._get_line(line_id)
        now = datetime.now(UTC)
        line.is_selected = bool(is_selected)
        line.updated_at = now
        self.updated_at = now

        self.raise_(
            CartLineSelectionChanged(
                cart_id=str(self.id),
                line_id=str(line.id),
                is_selected=bool(is_selected),
            )
        )

    def remove_line(self, line_id):
        line = self._get_line(line_id)
        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineRemoved(
                cart_id=str(self.id),
                line_id=str(line.id),
                product_id=str(line.product_id),
                variant_id=str(line.variant_id) if line.variant_id else None,
            )
        )

    def clear(self):
        count = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), lines_removed=count))


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        carts = self._dao.query.filter(user_id=str(user_id)).all().items
        return carts[0] if carts else None

    def get_or_create_for_user(self, user_id) -> Cart:
        return self.find_for_user(user_id) or Cart.create(user_id)
