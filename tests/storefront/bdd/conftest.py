"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then, when

from storefront.shared.errors import StorefrontError


@pytest.fixture()
def context():
    """Mutable scenario state: ids created by Given steps, results of When steps."""
    return {"order": None, "error": None}


@pytest.fixture()
def capture(context):
    """Run a When step, keeping either its order or its business error."""

    def _capture(action):
        try:
            context["order"] = action()
            context["error"] = None
        except StorefrontError as exc:
            context["error"] = exc

    return _capture


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a seller with a published product priced {price:f} with {stock:d} in stock"))
def _(context, make_product, price, stock):
    context["product_id"] = make_product(price=price, stock=stock)


@given("a buyer with a shipping address")
def _(context, buyer_id, address_id):
    context["buyer_id"] = buyer_id
    context["address_id"] = address_id


@given(parsers.cfparse("the buyer has {quantity:d} of the product in the cart"))
def _(context, add_to_cart, quantity):
    add_to_cart(context["product_id"], quantity=quantity)


@given(parsers.cfparse("the buyer has placed an order for {quantity:d} of the product"))
def _(context, services, add_to_cart, quantity):
    add_to_cart(context["product_id"], quantity=quantity)
    context["order"] = services.checkout.create_order_from_cart(context["buyer_id"], context["address_id"])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the product has {stock:d} in stock"))
def _(context, stock_of, stock):
    assert stock_of(context["product_id"]) == stock


@then(parsers.cfparse('the order status is "{status}"'))
def _(context, status):
    assert context["error"] is None
    assert context["order"].status == status


@then(parsers.cfparse('the operation fails with "{code}"'))
@then(parsers.cfparse('the checkout fails with "{code}"'))
def _(context, code):
    assert isinstance(context["error"], StorefrontError)
    assert context["error"].code == code


@then("no order exists")
def _(all_orders):
    assert all_orders() == []


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the buyer checks out")
def _(context, services, capture):
    capture(
        lambda: services.checkout.create_order_from_cart(context["buyer_id"], context["address_id"]),
    )
