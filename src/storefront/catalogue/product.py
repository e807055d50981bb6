"""Product aggregate root with its ProductVariant entity.

A product either sells from its own stock counter or, when a cart line names
a variant, from that variant's counter. The two counters are independent.
Every change to either counter goes through ``Product.adjust_stock``.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from storefront.domain import storefront
from storefront.shared.errors import ErrorKind, StorefrontError


class ProductStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


@storefront.entity(part_of="Product")
class ProductVariant:
    """A purchasable variation of a product, e.g. a size or colour."""

    name: String(required=True, max_length=100)
    sku: String(max_length=100)
    price: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)
    attributes: Text()

    @property
    def attribute_map(self) -> dict:
        if not self.attributes:
            return {}
        return json.loads(self.attributes)


@storefront.aggregate
class Product:
    """A listed product owned by a seller."""

    seller_id: Identifier(required=True)
    category_id: Identifier()
    name: String(required=True, max_length=200)
    slug: String(required=True, max_length=200, unique=True)
    description: Text()
    price: Float(required=True, min_value=0.0)
    sku: String(max_length=100)
    stock: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)
    images: Text()
    variants: HasMany(ProductVariant)
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    is_published: Boolean(default=False)
    published_at: DateTime()
    sales_count: Integer(default=0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})
        for variant in self.variants:
            if variant.stock is not None and variant.stock < 0:
                raise ValidationError({"stock": [f"Stock of variant {variant.name} cannot be negative"]})

    @invariant.post
    def images_must_be_a_json_list(self):
        if not self.images:
            return
        try:
            images = json.loads(self.images)
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"images": ["Images must be valid JSON"]}) from None
        if not isinstance(images, list):
            raise ValidationError({"images": ["Images must be a JSON list of URLs"]})

    @classmethod
    def create(
        cls,
        seller_id,
        name,
        slug,
        price,
        stock=0,
        sku=None,
        description=None,
        category_id=None,
        images=None,
        low_stock_threshold=10,
    ):
        from storefront.catalogue.events import ProductCreated

        product = cls(
            seller_id=seller_id,
            name=name,
            slug=slug,
            price=price,
            stock=stock,
            sku=sku,
            description=description,
            category_id=category_id,
            images=json.dumps(list(images)) if images else None,
            low_stock_threshold=low_stock_threshold,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                seller_id=seller_id,
                name=name,
                slug=slug,
                price=price,
                stock=stock,
                created_at=datetime.now(UTC),
            )
        )
        return product

    @property
    def image_list(self) -> list:
        if not self.images:
            return []
        return json.loads(self.images)

    @property
    def first_image(self):
        images = self.image_list
        return images[0] if images else None

    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def add_variant(self, name, stock=0, price=None, sku=None, attributes=None):
        from storefront.catalogue.events import VariantAdded

        variant = ProductVariant(
            name=name,
            stock=stock,
            price=price,
            sku=sku,
            attributes=json.dumps(attributes) if attributes else None,
        )
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=self.id,
                variant_id=variant.id,
                name=name,
                stock=stock,
            )
        )
        return variant

    def publish(self):
        from storefront.catalogue.events import ProductPublished

        if self.is_published:
            raise StorefrontError(ErrorKind.INVALID_STATUS, "Product is already published", product_id=str(self.id))

        now = datetime.now(UTC)
        self.is_published = True
        self.status = ProductStatus.ACTIVE.value
        self.published_at = now
        self.updated_at = now
        self.raise_(ProductPublished(product_id=self.id, published_at=now))

    def unpublish(self):
        from storefront.catalogue.events import ProductUnpublished

        if not self.is_published:
            raise StorefrontError(ErrorKind.INVALID_STATUS, "Product is not published", product_id=str(self.id))

        now = datetime.now(UTC)
        self.is_published = False
        self.status = ProductStatus.INACTIVE.value
        self.updated_at = now
        self.raise_(ProductUnpublished(product_id=self.id, unpublished_at=now))

    def adjust_stock(self, delta: int, variant_id=None, reason=None) -> int:
        """Apply ``stock += delta`` to the product or variant counter.

        Returns the new counter value. A change that would take the counter
        below zero raises ``INSUFFICIENT_STOCK`` and leaves it untouched.
        """
        from storefront.catalogue.events import StockAdjusted

        if variant_id:
            target = self.find_variant(variant_id)
            if target is None:
                raise StorefrontError(
                    ErrorKind.NOT_FOUND,
                    f"Variant {variant_id} not found on product {self.id}",
                    product_id=str(self.id),
                    variant_id=str(variant_id),
                )
        else:
            target = self

        previous = target.stock or 0
        new_stock = previous + delta
        if new_stock < 0:
            raise StorefrontError(
                ErrorKind.INSUFFICIENT_STOCK,
                f"Insufficient stock for product {self.name}: {previous} available, {-delta} requested",
                product_id=str(self.id),
                variant_id=str(variant_id) if variant_id else None,
                available=previous,
                requested=-delta,
            )

        target.stock = new_stock
        if reason == "checkout":
            self.sales_count = (self.sales_count or 0) - delta
        elif reason == "cancellation":
            self.sales_count = max((self.sales_count or 0) - delta, 0)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=self.id,
                variant_id=variant_id,
                delta=delta,
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
                low_stock_threshold=self.low_stock_threshold or 0,
                adjusted_at=datetime.now(UTC),
            )
        )
        return new_stock
