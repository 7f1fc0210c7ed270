"""Cart persistence: commands and handler that save or clear a customer's cart."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class SaveCart:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, color, size, quantity}


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


def clear_customer_cart(customer_id):
    """Empty the customer's stored cart, if any, inside the caller's unit of work."""
    repo = current_domain.repository_for(ShoppingCart)
    cart = repo.find_by_customer(customer_id)
    if cart is None:
        return False
    cart.clear()
    repo.add(cart)
    return True


@ordering.command_handler(part_of=ShoppingCart)
class CartPersistenceHandler:
    @handle(SaveCart)
    def save_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items

        cart = repo.find_by_customer(command.customer_id)
        if cart is None:
            cart = ShoppingCart.create(customer_id=command.customer_id)

        cart.replace_items(lines)
        repo.add(cart)
        logger.info("cart_saved", customer_id=str(command.customer_id), lines=len(lines))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cleared = clear_customer_cart(command.customer_id)
        logger.info("cart_cleared", customer_id=str(command.customer_id), found=cleared)
