"""FastAPI endpoints for the Storefront domain.

The acting user is identified by the ``X-User-Id`` header. Commands that only
touch one aggregate go through ``current_domain.process``; checkout, the order
lifecycle and stock adjustments go through the application services, which
take stock locks and therefore run in the threadpool.
"""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from storefront.account.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from storefront.account.registration import ReactivateAccount, RegisterAccount, SuspendAccount
from storefront.api.schemas import (
    AddressRequest,
    AddToCartRequest,
    AddVariantRequest,
    AdjustStockRequest,
    CancelOrderRequest,
    CartResponse,
    CheckoutRequest,
    CreateProductRequest,
    IdResponse,
    OrderListResponse,
    OrderResponse,
    PaymentCallbackRequest,
    RegisterAccountRequest,
    ShipOrderRequest,
    StatusResponse,
    StockResponse,
    SuspendAccountRequest,
    ToggleSelectionRequest,
    UpdateAddressRequest,
    UpdateCartQuantityRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, ToggleCartLineSelection, UpdateCartQuantity
from storefront.catalogue.management import AddVariant, CreateProduct, PublishProduct, UnpublishProduct
from storefront.domain import storefront
from storefront.services import StorefrontServices

account_router = APIRouter(prefix="/accounts", tags=["accounts"])
product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
payment_router = APIRouter(prefix="/payments", tags=["payments"])

UserId = Annotated[str, Header(alias="X-User-Id")]


def get_services(request: Request) -> StorefrontServices:
    return request.app.state.services


Services = Annotated[StorefrontServices, Depends(get_services)]


async def _run_blocking(func, *args, **kwargs):
    """Run a lock-taking service call off the event loop, inside the domain context."""

    def call():
        with storefront.domain_context():
            return func(*args, **kwargs)

    return await run_in_threadpool(call)


# --- Account endpoints ---


@account_router.post("", status_code=201, response_model=IdResponse)
async def register_account(body: RegisterAccountRequest) -> IdResponse:
    command = RegisterAccount(email=body.email, name=body.name, role=body.role)
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@account_router.put("/{account_id}/suspend", response_model=StatusResponse)
async def suspend_account(account_id: str, body: SuspendAccountRequest) -> StatusResponse:
    current_domain.process(SuspendAccount(account_id=account_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@account_router.put("/{account_id}/reactivate", response_model=StatusResponse)
async def reactivate_account(account_id: str) -> StatusResponse:
    current_domain.process(ReactivateAccount(account_id=account_id), asynchronous=False)
    return StatusResponse()


@account_router.post("/{account_id}/addresses", status_code=201, response_model=IdResponse)
async def add_address(account_id: str, body: AddressRequest) -> IdResponse:
    command = AddAddress(account_id=account_id, **body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@account_router.put("/{account_id}/addresses/{address_id}", response_model=StatusResponse)
async def update_address(account_id: str, address_id: str, body: UpdateAddressRequest) -> StatusResponse:
    command = UpdateAddress(
        account_id=account_id,
        address_id=address_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@account_router.put("/{account_id}/addresses/{address_id}/default", response_model=StatusResponse)
async def set_default_address(account_id: str, address_id: str) -> StatusResponse:
    current_domain.process(SetDefaultAddress(account_id=account_id, address_id=address_id), asynchronous=False)
    return StatusResponse()


@account_router.delete("/{account_id}/addresses/{address_id}", response_model=StatusResponse)
async def remove_address(account_id: str, address_id: str) -> StatusResponse:
    current_domain.process(RemoveAddress(account_id=account_id, address_id=address_id), asynchronous=False)
    return StatusResponse()


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=IdResponse)
async def create_product(body: CreateProductRequest, user_id: UserId) -> IdResponse:
    command = CreateProduct(
        seller_id=user_id,
        name=body.name,
        slug=body.slug,
        price=body.price,
        stock=body.stock,
        sku=body.sku,
        description=body.description,
        category_id=body.category_id,
        images=json.dumps(body.images) if body.images else None,
        low_stock_threshold=body.low_stock_threshold,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@product_router.post("/{product_id}/variants", status_code=201, response_model=IdResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> IdResponse:
    command = AddVariant(
        product_id=product_id,
        name=body.name,
        stock=body.stock,
        price=body.price,
        sku=body.sku,
        attributes=json.dumps(body.attributes) if body.attributes else None,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@product_router.put("/{product_id}/publish", response_model=StatusResponse)
async def publish_product(product_id: str) -> StatusResponse:
    current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/unpublish", response_model=StatusResponse)
async def unpublish_product(product_id: str) -> StatusResponse:
    current_domain.process(UnpublishProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.post("/{product_id}/stock", response_model=StockResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest, user_id: UserId, services: Services) -> StockResponse:
    def adjust():
        actor = services.directory.resolve_user(user_id)
        return services.stock.manual_adjustment(product_id, body.delta, actor, variant_id=body.variant_id)

    new_stock = await _run_blocking(adjust)
    return StockResponse(product_id=product_id, variant_id=body.variant_id, stock=new_stock)


# --- Cart endpoints ---


@cart_router.get("", response_model=CartResponse)
async def get_cart(user_id: UserId) -> CartResponse:
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    return CartResponse.from_cart(cart)


@cart_router.post("/lines", status_code=201, response_model=IdResponse)
async def add_to_cart(body: AddToCartRequest, user_id: UserId) -> IdResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@cart_router.put("/lines/{line_id}", response_model=StatusResponse)
async def update_cart_quantity(line_id: str, body: UpdateCartQuantityRequest, user_id: UserId) -> StatusResponse:
    command = UpdateCartQuantity(user_id=user_id, line_id=line_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/lines/{line_id}/selection", response_model=StatusResponse)
async def toggle_selection(line_id: str, body: ToggleSelectionRequest, user_id: UserId) -> StatusResponse:
    command = ToggleCartLineSelection(user_id=user_id, line_id=line_id, is_selected=body.is_selected)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/lines/{line_id}", response_model=StatusResponse)
async def remove_from_cart(line_id: str, user_id: UserId) -> StatusResponse:
    current_domain.process(RemoveFromCart(user_id=user_id, line_id=line_id), asynchronous=False)
    return StatusResponse()


# --- Order endpoints ---


def _order_response(order) -> OrderResponse:
    return OrderResponse.from_order(order)


@order_router.post("", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, user_id: UserId, services: Services) -> OrderResponse:
    def place():
        order = services.checkout.create_order_from_cart(user_id, body.address_id, body.buyer_message)
        return _order_response(order)

    return await _run_blocking(place)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    user_id: UserId,
    services: Services,
    status: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> OrderListResponse:
    orders, total = services.lifecycle.list_user_orders(user_id, status=status, page=page, page_size=page_size)
    return OrderListResponse(
        orders=[_order_response(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, user_id: UserId, services: Services) -> OrderResponse:
    return _order_response(services.lifecycle.get_order_detail(order_id, user_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest, user_id: UserId, services: Services) -> OrderResponse:
    def cancel():
        return _order_response(services.lifecycle.cancel_order(order_id, user_id, reason=body.reason))

    return await _run_blocking(cancel)


@order_router.post("/{order_id}/ship", response_model=OrderResponse)
async def ship_order(order_id: str, body: ShipOrderRequest, user_id: UserId, services: Services) -> OrderResponse:
    def ship():
        order = services.lifecycle.ship_order(order_id, user_id, body.shipping_company, body.tracking_number)
        return _order_response(order)

    return await _run_blocking(ship)


@order_router.post("/{order_id}/complete", response_model=OrderResponse)
async def complete_order(order_id: str, user_id: UserId, services: Services) -> OrderResponse:
    def complete():
        return _order_response(services.lifecycle.complete_order(order_id, user_id))

    return await _run_blocking(complete)


# --- Payment callback ---


@payment_router.post("/callback", response_model=OrderResponse)
async def payment_callback(body: PaymentCallbackRequest, services: Services) -> OrderResponse:
    def mark_paid():
        return _order_response(services.lifecycle.handle_payment_success(body.order_no))

    return await _run_blocking(mark_paid)
