import json
import os
from uuid import uuid4

import pytest
from protean import current_domain

ADDRESS = {
    "receiver_name": "Jane Doe",
    "receiver_phone": "13800000000",
    "province": "Zhejiang",
    "city": "Hangzhou",
    "district": "Xihu",
    "street": "Wensan Road",
    "detail_address": "Building 3, Room 502",
    "postal_code": "310000",
}


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def services(_storefront_domain):
    from storefront.services import build_services

    return build_services(_storefront_domain)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_account():
    from storefront.account.registration import RegisterAccount

    def _make(name="Test User", role="buyer", email=None):
        return current_domain.process(
            RegisterAccount(
                email=email or f"{uuid4().hex[:10]}@example.com",
                name=name,
                role=role,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def buyer_id(make_account):
    return make_account(name="Buyer", role="buyer")


@pytest.fixture()
def seller_id(make_account):
    return make_account(name="Seller", role="seller")


@pytest.fixture()
def admin_id(make_account):
    return make_account(name="Admin", role="admin")


@pytest.fixture()
def make_address():
    from storefront.account.addresses import AddAddress

    def _make(account_id, **overrides):
        return current_domain.process(
            AddAddress(account_id=account_id, **{**ADDRESS, **overrides}),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def address_id(buyer_id, make_address):
    return make_address(buyer_id)


@pytest.fixture()
def make_product(seller_id):
    from storefront.catalogue.management import CreateProduct, PublishProduct

    def _make(price=50.0, stock=5, name="Widget", published=True, images=None, owner_id=None):
        product_id = current_domain.process(
            CreateProduct(
                seller_id=owner_id or seller_id,
                name=name,
                slug=f"widget-{uuid4().hex[:8]}",
                price=price,
                stock=stock,
                sku=f"SKU-{uuid4().hex[:6].upper()}",
                images=json.dumps(images) if images else None,
            ),
            asynchronous=False,
        )
        if published:
            current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
        return product_id

    return _make


@pytest.fixture()
def add_variant():
    from storefront.catalogue.management import AddVariant

    def _add(product_id, name="Large", stock=5, price=None, attributes=None):
        return current_domain.process(
            AddVariant(
                product_id=product_id,
                name=name,
                stock=stock,
                price=price,
                attributes=json.dumps(attributes) if attributes else None,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def add_to_cart(buyer_id):
    from storefront.cart.items import AddToCart

    def _add(product_id, quantity=1, variant_id=None, user_id=None):
        return current_domain.process(
            AddToCart(
                user_id=user_id or buyer_id,
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def stock_of():
    from storefront.catalogue.product import Product

    def _stock(product_id, variant_id=None):
        product = current_domain.repository_for(Product).get(product_id)
        if variant_id:
            return product.find_variant(variant_id).stock
        return product.stock

    return _stock


@pytest.fixture()
def cart_of(buyer_id):
    from storefront.cart.cart import Cart

    def _cart(user_id=None):
        return current_domain.repository_for(Cart).find_for_user(user_id or buyer_id)

    return _cart


@pytest.fixture()
def all_orders():
    from storefront.order.order import Order

    def _orders():
        return current_domain.repository_for(Order)._dao.query.all().items

    return _orders
