"""Order lifecycle after checkout: cancel, pay, ship, complete and reads."""

import pytest

from storefront.order.order import OrderStatus, PaymentStatus
from storefront.shared.errors import ErrorKind, StorefrontError


@pytest.fixture()
def product_id(make_product):
    return make_product(price=50.0, stock=5)


@pytest.fixture()
def place_order(services, buyer_id, address_id, product_id, add_to_cart):
    def _place(quantity=2):
        add_to_cart(product_id, quantity=quantity)
        return services.checkout.create_order_from_cart(buyer_id, address_id)

    return _place


@pytest.fixture()
def paid_order(services, place_order):
    order = place_order()
    return services.lifecycle.handle_payment_success(order.order_no)


class TestCancel:
    def test_cancel_restores_stock(self, services, buyer_id, place_order, product_id, stock_of):
        order = place_order(quantity=2)
        assert stock_of(product_id) == 3

        cancelled = services.lifecycle.cancel_order(order.id, buyer_id, reason="Changed my mind")

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert cancelled.cancellation_reason == "Changed my mind"
        assert stock_of(product_id) == 5

    def test_second_cancel_does_not_restock_twice(self, services, buyer_id, place_order, product_id, stock_of):
        order = place_order(quantity=2)
        services.lifecycle.cancel_order(order.id, buyer_id)

        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.cancel_order(order.id, buyer_id)

        assert exc.value.kind is ErrorKind.INVALID_STATUS
        assert stock_of(product_id) == 5

    def test_paid_orders_cannot_be_cancelled(self, services, buyer_id, paid_order, product_id, stock_of):
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.cancel_order(paid_order.id, buyer_id)

        assert exc.value.kind is ErrorKind.INVALID_STATUS
        assert stock_of(product_id) == 3

    def test_cancel_restores_variant_and_product_counters(
        self, services, buyer_id, address_id, make_product, add_variant, add_to_cart, stock_of
    ):
        product_id = make_product(price=20.0, stock=7)
        variant_id = add_variant(product_id, name="Red", stock=4)
        add_to_cart(product_id, quantity=2)
        add_to_cart(product_id, quantity=1, variant_id=variant_id)

        order = services.checkout.create_order_from_cart(buyer_id, address_id)
        assert (stock_of(product_id), stock_of(product_id, variant_id)) == (5, 3)

        services.lifecycle.cancel_order(order.id, buyer_id)

        assert stock_of(product_id) == 7
        assert stock_of(product_id, variant_id) == 4

    def test_other_users_order(self, services, make_account, place_order):
        order = place_order()
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.cancel_order(order.id, make_account(name="Other"))
        assert exc.value.kind is ErrorKind.NOT_FOUND


class TestPayment:
    def test_marks_order_paid(self, services, place_order):
        order = place_order()

        paid = services.lifecycle.handle_payment_success(order.order_no)

        assert paid.status == OrderStatus.PAID.value
        assert paid.payment_status == PaymentStatus.PAID.value
        assert paid.paid_at is not None

    def test_repeated_callbacks_are_harmless(self, services, place_order):
        order = place_order()

        first = services.lifecycle.handle_payment_success(order.order_no)
        second = services.lifecycle.handle_payment_success(order.order_no)

        assert second.status == OrderStatus.PAID.value
        assert second.paid_at == first.paid_at

    def test_unknown_order_no(self, services):
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.handle_payment_success("20260101999999")
        assert exc.value.kind is ErrorKind.NOT_FOUND

    def test_cancelled_order_cannot_be_paid(self, services, buyer_id, place_order):
        order = place_order()
        services.lifecycle.cancel_order(order.id, buyer_id)

        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.handle_payment_success(order.order_no)
        assert exc.value.kind is ErrorKind.INVALID_STATUS


class TestShip:
    def test_pending_order_cannot_ship(self, services, seller_id, place_order):
        order = place_order()

        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.ship_order(order.id, seller_id, "SF Express", "SF123")

        assert exc.value.kind is ErrorKind.INVALID_STATUS

    def test_owning_seller_ships(self, services, seller_id, paid_order):
        shipped = services.lifecycle.ship_order(paid_order.id, seller_id, "SF Express", "SF123")

        assert shipped.status == OrderStatus.SHIPPED.value
        assert shipped.shipping_company == "SF Express"
        assert shipped.tracking_number == "SF123"
        assert str(shipped.shipped_by) == seller_id

    def test_admin_ships_any_order(self, services, admin_id, paid_order):
        shipped = services.lifecycle.ship_order(paid_order.id, admin_id, "EMS", "E1")
        assert shipped.status == OrderStatus.SHIPPED.value

    def test_other_seller_is_forbidden(self, services, make_account, paid_order):
        other = make_account(name="Other Seller", role="seller")
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.ship_order(paid_order.id, other, "EMS", "E1")
        assert exc.value.kind is ErrorKind.FORBIDDEN

    def test_buyer_is_forbidden(self, services, buyer_id, paid_order):
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.ship_order(paid_order.id, buyer_id, "EMS", "E1")
        assert exc.value.kind is ErrorKind.FORBIDDEN


class TestComplete:
    def test_complete_shipped_order(self, services, buyer_id, seller_id, paid_order):
        services.lifecycle.ship_order(paid_order.id, seller_id, "SF Express", "SF123")

        completed = services.lifecycle.complete_order(paid_order.id, buyer_id)

        assert completed.status == OrderStatus.COMPLETED.value
        assert completed.completed_at is not None

    def test_paid_order_cannot_complete(self, services, buyer_id, paid_order):
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.complete_order(paid_order.id, buyer_id)
        assert exc.value.kind is ErrorKind.INVALID_STATUS


class TestReads:
    def test_detail(self, services, buyer_id, place_order):
        order = place_order()
        detail = services.lifecycle.get_order_detail(order.id, buyer_id)
        assert detail.order_no == order.order_no
        assert len(detail.lines) == 1

    def test_detail_of_other_users_order(self, services, make_account, place_order):
        order = place_order()
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.get_order_detail(order.id, make_account(name="Other"))
        assert exc.value.kind is ErrorKind.NOT_FOUND

    def test_list_with_status_filter_and_paging(self, services, buyer_id, place_order):
        first = place_order(quantity=1)
        place_order(quantity=1)
        services.lifecycle.cancel_order(first.id, buyer_id)

        orders, total = services.lifecycle.list_user_orders(buyer_id)
        assert total == 2

        cancelled, total = services.lifecycle.list_user_orders(buyer_id, status="cancelled")
        assert total == 1
        assert cancelled[0].id == first.id

        page, total = services.lifecycle.list_user_orders(buyer_id, page=2, page_size=1)
        assert total == 2
        assert len(page) == 1

    def test_unknown_status_filter(self, services, buyer_id):
        with pytest.raises(StorefrontError) as exc:
            services.lifecycle.list_user_orders(buyer_id, status="lost")
        assert exc.value.kind is ErrorKind.INVALID_STATUS


class TestLockRegistry:
    def test_no_lock_entries_left_after_transitions(self, services, buyer_id, seller_id, place_order):
        for _attempt in range(3):
            order = place_order(quantity=1)
            services.lifecycle.handle_payment_success(order.order_no)
            services.lifecycle.ship_order(order.id, seller_id, "SF Express", "SF123")
            services.lifecycle.complete_order(order.id, buyer_id)

        cancelled = place_order(quantity=1)
        services.lifecycle.cancel_order(cancelled.id, buyer_id)

        assert services.locks._locks == {}
