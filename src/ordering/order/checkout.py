"""Checkout: turn a customer's cart into a pending order in one unit of work.

Live stock is re-read for every line inside the same unit of work that
takes it, so validation and decrement cannot drift apart.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.cart.persistence import clear_customer_cart
from ordering.catalogue.product import Product
from ordering.domain import ordering
from ordering.errors import EmptyCart, InsufficientStock, StockShortfall
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, name, color, size, quantity, unit_price}


def find_shortfalls(lines, products):
    """Every line that the remaining live stock cannot cover.

    Lines of the same product draw on one stock count in cart order, so two
    sizes of a shoe with 3 units left cannot both take 2.
    """
    remaining = {product_id: product.stock for product_id, product in products.items() if product.available}
    shortfalls = []
    for line in lines:
        product_id = str(line["product_id"])
        product = products.get(product_id)
        available = remaining.get(product_id, 0)
        if line["quantity"] > available:
            shortfalls.append(
                StockShortfall(
                    product_id=product_id,
                    name=product.name if product else line.get("name") or product_id,
                    requested=line["quantity"],
                    available=available,
                    color=line.get("color") or "",
                    size=str(line.get("size") or ""),
                )
            )
        else:
            remaining[product_id] = available - line["quantity"]
    return shortfalls


@ordering.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        if not lines:
            raise EmptyCart(command.customer_id)

        product_repo = current_domain.repository_for(Product)
        products = {}
        for line in lines:
            product_id = str(line["product_id"])
            if product_id not in products:
                try:
                    products[product_id] = product_repo.get(product_id)
                except ObjectNotFoundError:
                    products[product_id] = None
        products = {product_id: product for product_id, product in products.items() if product is not None}

        shortfalls = find_shortfalls(lines, products)
        if shortfalls:
            logger.info(
                "checkout_rejected",
                customer_id=str(command.customer_id),
                products=[shortfall.product_id for shortfall in shortfalls],
            )
            raise InsufficientStock(shortfalls)

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            number=order_repo.next_number(),
            customer_id=command.customer_id,
            lines=lines,
        )

        for line in lines:
            products[str(line["product_id"])].decrement_stock(line["quantity"])
        for product in products.values():
            product_repo.add(product)

        order_repo.add(order)
        clear_customer_cart(command.customer_id)

        logger.info(
            "order_placed",
            order_number=order.number,
            tracking_code=order.tracking_code,
            customer_id=str(command.customer_id),
            total=order.total,
        )
        return {
            "order_id": str(order.id),
            "number": order.number,
            "tracking_code": order.tracking_code,
            "total": order.total,
        }
