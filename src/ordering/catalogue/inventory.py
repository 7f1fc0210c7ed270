"""Inventory maintenance: staff add, edit and delete shoes."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.domain import ordering

logger = structlog.get_logger(__name__)

SOFT_DELETE = "soft"
HARD_DELETE = "hard"


@ordering.command(part_of="Product")
class AddProduct:
    product_id = Identifier()  # Optional, generated when omitted
    name = String(max_length=150)
    price = Float()
    stock = Integer()
    colors = String(max_length=255)
    sizes = String(max_length=255)
    image = String(max_length=500)
    available = Boolean(default=True)


@ordering.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    name = String(max_length=150)
    price = Float()
    stock = Integer()
    colors = String(max_length=255)
    sizes = String(max_length=255)
    image = String(max_length=500)
    available = Boolean()


@ordering.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Product)
class InventoryHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            name=command.name,
            price=command.price,
            stock=command.stock,
            colors=command.colors,
            sizes=command.sizes,
            image=command.image,
            available=command.available,
            product_id=command.product_id,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), name=product.name, stock=product.stock)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.revise(
            name=command.name,
            price=command.price,
            stock=command.stock,
            colors=command.colors,
            sizes=command.sizes,
            image=command.image,
            available=command.available,
        )
        repo.add(product)
        logger.info("product_updated", product_id=str(product.id), stock=product.stock)

    @handle(DeleteProduct)
    def delete_product(self, command):
        """Withdraw products that appear on orders; remove the rest outright."""
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if product.has_order_history:
            product.withdraw()
            repo.add(product)
            mode = SOFT_DELETE
        else:
            repo._dao.delete(product)
            mode = HARD_DELETE
        logger.info("product_deleted", product_id=str(command.product_id), mode=mode)
        return mode
