"""Tests for the Product aggregate and its stock counters."""

import pytest

from storefront.catalogue.events import ProductPublished, StockAdjusted
from storefront.catalogue.product import Product, ProductStatus
from storefront.shared.errors import ErrorKind, StorefrontError


def _make_product(stock=5, price=50.0, images=None):
    product = Product.create(
        seller_id="seller-1",
        name="Widget",
        slug="widget",
        price=price,
        stock=stock,
        images=images,
    )
    product._events.clear()
    return product


class TestCreation:
    def test_products_start_unpublished(self):
        product = _make_product()
        assert product.is_published is False
        assert product.status == ProductStatus.DRAFT.value

    def test_first_image(self):
        product = _make_product(images=["a.jpg", "b.jpg"])
        assert product.image_list == ["a.jpg", "b.jpg"]
        assert product.first_image == "a.jpg"

    def test_no_images(self):
        assert _make_product().first_image is None


class TestPublication:
    def test_publish(self):
        product = _make_product()
        product.publish()
        assert product.is_published is True
        assert product.published_at is not None
        assert isinstance(product._events[0], ProductPublished)

    def test_publish_twice_rejected(self):
        product = _make_product()
        product.publish()
        with pytest.raises(StorefrontError) as exc:
            product.publish()
        assert exc.value.kind is ErrorKind.INVALID_STATUS

    def test_unpublish(self):
        product = _make_product()
        product.publish()
        product.unpublish()
        assert product.is_published is False
        assert product.status == ProductStatus.INACTIVE.value


class TestAdjustStock:
    def test_decrement_product_stock(self):
        product = _make_product(stock=5)
        assert product.adjust_stock(-2) == 3
        assert product.stock == 3

        event = product._events[0]
        assert isinstance(event, StockAdjusted)
        assert event.previous_stock == 5
        assert event.new_stock == 3
        assert event.delta == -2

    def test_cannot_go_below_zero(self):
        product = _make_product(stock=1)
        with pytest.raises(StorefrontError) as exc:
            product.adjust_stock(-2)
        assert exc.value.kind is ErrorKind.INSUFFICIENT_STOCK
        assert product.stock == 1
        assert product._events == []

    def test_can_reach_exactly_zero(self):
        product = _make_product(stock=2)
        assert product.adjust_stock(-2) == 0

    def test_variant_stock_is_independent(self):
        product = _make_product(stock=5)
        variant = product.add_variant(name="Large", stock=2)

        product.adjust_stock(-2, variant_id=variant.id)

        assert product.find_variant(variant.id).stock == 0
        assert product.stock == 5

    def test_unknown_variant(self):
        product = _make_product()
        with pytest.raises(StorefrontError) as exc:
            product.adjust_stock(-1, variant_id="missing")
        assert exc.value.kind is ErrorKind.NOT_FOUND

    def test_checkout_and_cancellation_track_sales(self):
        product = _make_product(stock=5)
        product.adjust_stock(-3, reason="checkout")
        assert product.sales_count == 3
        product.adjust_stock(3, reason="cancellation")
        assert product.sales_count == 0


class TestVariants:
    def test_variant_attributes(self):
        product = _make_product()
        variant = product.add_variant(name="Red / L", stock=3, price=55.0, attributes={"color": "red", "size": "L"})
        assert variant.attribute_map == {"color": "red", "size": "L"}
        assert variant.price == 55.0

    def test_variant_without_attributes(self):
        product = _make_product()
        variant = product.add_variant(name="Plain")
        assert variant.attribute_map == {}
        assert variant.stock == 0
