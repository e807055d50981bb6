"""Product listing: commands and handler."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.account.account import Account, AccountRole
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import ErrorKind, StorefrontError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    """List a new product for a seller. Products start unpublished."""

    seller_id: Identifier(required=True)
    name: String(required=True, max_length=200)
    slug: String(required=True, max_length=200)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    sku: String(max_length=100)
    description: Text()
    category_id: Identifier()
    images: Text()  # JSON list of URLs
    low_stock_threshold: Integer(default=10, min_value=0)


@storefront.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    name: String(required=True, max_length=100)
    stock: Integer(default=0, min_value=0)
    price: Float(min_value=0.0)
    sku: String(max_length=100)
    attributes: Text()  # JSON object


@storefront.command(part_of="Product")
class PublishProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class UnpublishProduct:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        seller = current_domain.repository_for(Account).get(command.seller_id)
        if seller.role not in (AccountRole.SELLER.value, AccountRole.ADMIN.value) or not seller.is_active:
            raise StorefrontError(
                ErrorKind.FORBIDDEN,
                "Only active sellers can list products",
                seller_id=str(command.seller_id),
            )

        images = json.loads(command.images) if command.images else None
        product = Product.create(
            seller_id=command.seller_id,
            name=command.name,
            slug=command.slug,
            price=command.price,
            stock=command.stock or 0,
            sku=command.sku,
            description=command.description,
            category_id=command.category_id,
            images=images,
            low_stock_threshold=command.low_stock_threshold if command.low_stock_threshold is not None else 10,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), seller_id=str(command.seller_id))
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            name=command.name,
            stock=command.stock or 0,
            price=command.price,
            sku=command.sku,
            attributes=json.loads(command.attributes) if command.attributes else None,
        )
        repo.add(product)
        return str(variant.id)

    @handle(PublishProduct)
    def publish_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.publish()
        repo.add(product)

    @handle(UnpublishProduct)
    def unpublish_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.unpublish()
        repo.add(product)
