"""BDD tests for the order lifecycle after checkout."""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_lifecycle.feature")


@given("the buyer has cancelled the order")
def _(context, services):
    context["order"] = services.lifecycle.cancel_order(context["order"].id, context["buyer_id"])


@given("the payment callback has arrived")
def _(context, services):
    context["order"] = services.lifecycle.handle_payment_success(context["order"].order_no)


@when("the buyer cancels the order")
def _(context, services, capture):
    order_id = context["order"].id
    capture(lambda: services.lifecycle.cancel_order(order_id, context["buyer_id"]))


@when(parsers.cfparse("the payment callback arrives {times:d} times"))
def _(context, services, capture, times):
    order_no = context["order"].order_no
    for _attempt in range(times):
        capture(lambda: services.lifecycle.handle_payment_success(order_no))


@when(parsers.cfparse('the seller ships the order with "{company}" tracking "{tracking}"'))
def _(context, services, capture, seller_id, company, tracking):
    order_id = context["order"].id
    capture(lambda: services.lifecycle.ship_order(order_id, seller_id, company, tracking))


@when("the buyer confirms receipt")
def _(context, services, capture):
    order_id = context["order"].id
    capture(lambda: services.lifecycle.complete_order(order_id, context["buyer_id"]))


@then(parsers.cfparse('the order payment status is "{status}"'))
def _(context, status):
    assert context["order"].payment_status == status
