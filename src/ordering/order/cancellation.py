"""Order cancellation: cancel and return every item's stock in one unit of work."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalogue.catalog import increment_stock
from ordering.domain import ordering
from ordering.order.order import Order, order_by_number
from ordering.session import Role

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CancelOrder:
    order_number = Integer(required=True)
    actor = String(required=True, choices=Role)
    requested_by = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = order_by_number(command.order_number)
        previous = order.status
        order.cancel(actor=Role(command.actor), requested_by=command.requested_by)

        for item in order.items:
            increment_stock(item.product_id, item.quantity)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_cancelled",
            order_number=order.number,
            tracking_code=order.tracking_code,
            from_status=previous,
            cancelled_by=command.actor,
            requested_by=str(command.requested_by),
        )
        return order.status
