"""Pydantic request/response schemas for the Storefront API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from storefront.shared.money import format_amount

# --- Account Schemas ---


class RegisterAccountRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "jane@example.com",
                    "name": "Jane Doe",
                    "role": "buyer",
                }
            ]
        }
    }

    email: str = Field(..., max_length=255)
    name: str = Field(..., max_length=100)
    role: str = Field("buyer", max_length=20)


class SuspendAccountRequest(BaseModel):
    reason: str = Field(..., max_length=500)


class AddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "receiver_name": "Jane Doe",
                    "receiver_phone": "13800000000",
                    "province": "Zhejiang",
                    "city": "Hangzhou",
                    "district": "Xihu",
                    "street": "Wensan Road",
                    "detail_address": "Building 3, Room 502",
                    "postal_code": "310000",
                    "label": "Home",
                    "is_default": True,
                }
            ]
        }
    }

    receiver_name: str = Field(..., max_length=100)
    receiver_phone: str = Field(..., max_length=20)
    province: str = Field(..., max_length=50)
    city: str = Field(..., max_length=50)
    district: str = Field(..., max_length=50)
    street: str = Field(..., max_length=200)
    detail_address: str = Field(..., max_length=200)
    postal_code: str | None = Field(None, max_length=10)
    label: str | None = Field(None, max_length=20)
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    receiver_name: str | None = Field(None, max_length=100)
    receiver_phone: str | None = Field(None, max_length=20)
    province: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=50)
    district: str | None = Field(None, max_length=50)
    street: str | None = Field(None, max_length=200)
    detail_address: str | None = Field(None, max_length=200)
    postal_code: str | None = Field(None, max_length=10)
    label: str | None = Field(None, max_length=20)
    is_default: bool | None = None


# --- Product Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Black T-Shirt",
                    "slug": "classic-black-tshirt",
                    "price": 50.0,
                    "stock": 100,
                    "sku": "TSHIRT-BLK",
                    "images": ["https://cdn.example.com/tshirt-front.jpg"],
                }
            ]
        }
    }

    name: str = Field(..., max_length=200)
    slug: str = Field(..., max_length=200)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    sku: str | None = Field(None, max_length=100)
    description: str | None = None
    category_id: str | None = None
    images: list[str] | None = None
    low_stock_threshold: int = Field(10, ge=0)


class AddVariantRequest(BaseModel):
    name: str = Field(..., max_length=100)
    stock: int = Field(0, ge=0)
    price: float | None = Field(None, ge=0)
    sku: str | None = Field(None, max_length=100)
    attributes: dict[str, str] | None = None


class AdjustStockRequest(BaseModel):
    delta: int
    variant_id: str | None = None


class StockResponse(BaseModel):
    product_id: str
    variant_id: str | None = None
    stock: int


# --- Cart Schemas ---


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(1, ge=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class ToggleSelectionRequest(BaseModel):
    is_selected: bool


class CartLineResponse(BaseModel):
    id: str
    product_id: str
    variant_id: str | None = None
    quantity: int
    is_selected: bool


class CartResponse(BaseModel):
    lines: list[CartLineResponse] = []

    @classmethod
    def from_cart(cls, cart) -> CartResponse:
        if cart is None:
            return cls(lines=[])
        return cls(
            lines=[
                CartLineResponse(
                    id=str(line.id),
                    product_id=str(line.product_id),
                    variant_id=str(line.variant_id) if line.variant_id else None,
                    quantity=line.quantity,
                    is_selected=bool(line.is_selected),
                )
                for line in cart.lines
            ]
        )


# --- Order Schemas ---


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "address_id": "addr-001",
                    "buyer_message": "Please leave at the front desk",
                }
            ]
        }
    }

    address_id: str
    buyer_message: str | None = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class ShipOrderRequest(BaseModel):
    shipping_company: str = Field(..., max_length=100)
    tracking_number: str = Field(..., max_length=100)


class PaymentCallbackRequest(BaseModel):
    order_no: str = Field(..., max_length=20)


class OrderLineResponse(BaseModel):
    id: str
    product_id: str | None = None
    variant_id: str | None = None
    product_snapshot: dict
    price: str
    quantity: int
    subtotal: str


class OrderResponse(BaseModel):
    id: str
    order_no: str
    user_id: str
    status: str
    payment_status: str
    total_amount: str
    discount_amount: str
    shipping_fee: str
    payment_amount: str
    shipping_address: dict
    buyer_message: str | None = None
    shipping_company: str | None = None
    tracking_number: str | None = None
    lines: list[OrderLineResponse] = []
    created_at: str | None = None
    paid_at: str | None = None
    shipped_at: str | None = None
    completed_at: str | None = None
    cancelled_at: str | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        def _ts(value):
            return value.isoformat() if value else None

        return cls(
            id=str(order.id),
            order_no=order.order_no,
            user_id=str(order.user_id),
            status=order.status,
            payment_status=order.payment_status,
            total_amount=format_amount(order.total_amount),
            discount_amount=format_amount(order.discount_amount or 0),
            shipping_fee=format_amount(order.shipping_fee or 0),
            payment_amount=format_amount(order.payment_amount),
            shipping_address=order.shipping_address.to_dict(),
            buyer_message=order.buyer_message,
            shipping_company=order.shipping_company,
            tracking_number=order.tracking_number,
            lines=[
                OrderLineResponse(
                    id=str(line.id),
                    product_id=str(line.product_id) if line.product_id else None,
                    variant_id=str(line.variant_id) if line.variant_id else None,
                    product_snapshot=line.product_snapshot.to_dict(),
                    price=format_amount(line.price),
                    quantity=line.quantity,
                    subtotal=format_amount(line.subtotal),
                )
                for line in order.lines
            ],
            created_at=_ts(order.created_at),
            paid_at=_ts(order.paid_at),
            shipped_at=_ts(order.shipped_at),
            completed_at=_ts(order.completed_at),
            cancelled_at=_ts(order.cancelled_at),
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    page_size: int


# --- Common ---


class IdResponse(BaseModel):
    id: str


class StatusResponse(BaseModel):
    status: str = "ok"
