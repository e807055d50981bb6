"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.cart.cart import Cart
from storefront.cart.events import CartLineAdded, CartLineRemoved
from storefront.shared.errors import ErrorKind, StorefrontError


def _make_cart():
    return Cart.create(user_id="user-1")


class TestAddLine:
    def test_new_lines_are_selected(self):
        cart = _make_cart()
        line = cart.add_line("prod-1", 2)
        assert line.quantity == 2
        assert line.is_selected is True
        assert isinstance(cart._events[-1], CartLineAdded)

    def test_same_key_merges_quantity(self):
        cart = _make_cart()
        first = cart.add_line("prod-1", 2)
        merged = cart.add_line("prod-1", 3)

        assert len(cart.lines) == 1
        assert merged.id == first.id
        assert merged.quantity == 5
        assert cart._events[-1].line_quantity == 5

    def test_same_variant_merges(self):
        cart = _make_cart()
        cart.add_line("prod-1", 1, variant_id="var-1")
        cart.add_line("prod-1", 1, variant_id="var-1")
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 2

    def test_no_variant_is_a_distinct_key(self):
        cart = _make_cart()
        cart.add_line("prod-1", 1)
        cart.add_line("prod-1", 1, variant_id="var-1")
        cart.add_line("prod-1", 1, variant_id="var-2")
        assert len(cart.lines) == 3

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_line("prod-1", 0)


class TestLineChanges:
    def test_update_quantity(self):
        cart = _make_cart()
        line = cart.add_line("prod-1", 1)
        cart.update_quantity(line.id, 4)
        assert cart.find_line(line.id).quantity == 4

    def test_update_quantity_must_be_positive(self):
        cart = _make_cart()
        line = cart.add_line("prod-1", 1)
        with pytest.raises(ValidationError):
            cart.update_quantity(line.id, 0)

    def test_toggle_selected(self):
        cart = _make_cart()
        line = cart.add_line("prod-1", 1)
        other = cart.add_line("prod-2", 1)

        cart.toggle_selected(line.id, False)

        assert [selected.id for selected in cart.selected_lines()] == [other.id]

    def test_remove_line(self):
        cart = _make_cart()
        line = cart.add_line("prod-1", 1)
        cart.remove_line(line.id)
        assert cart.lines == []
        assert isinstance(cart._events[-1], CartLineRemoved)

    def test_unknown_line(self):
        cart = _make_cart()
        with pytest.raises(StorefrontError) as exc:
            cart.remove_line("missing")
        assert exc.value.kind is ErrorKind.NOT_FOUND

    def test_clear(self):
        cart = _make_cart()
        cart.add_line("prod-1", 1)
        cart.add_line("prod-2", 1)
        cart.clear()
        assert cart.lines == []
        assert cart._events[-1].lines_removed == 2
