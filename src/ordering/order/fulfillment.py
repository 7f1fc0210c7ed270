"""Order fulfilment: staff move orders along the pipeline one step at a time."""

import structlog
from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus, order_by_number
from ordering.session import Role

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkProcessing:
    order_number = Integer(required=True)
    actor = String(choices=Role, default=Role.STAFF.value)


@ordering.command(part_of="Order")
class MarkToShip:
    order_number = Integer(required=True)
    actor = String(choices=Role, default=Role.STAFF.value)


@ordering.command(part_of="Order")
class MarkShipped:
    order_number = Integer(required=True)
    actor = String(choices=Role, default=Role.STAFF.value)


_STEPS = {
    OrderStatus.PROCESSING: Order.mark_processing,
    OrderStatus.TO_SHIP: Order.mark_to_ship,
    OrderStatus.SHIPPED: Order.mark_shipped,
}


def _step(command, target):
    repo = current_domain.repository_for(Order)
    order = order_by_number(command.order_number)
    previous = order.status
    _STEPS[target](order, actor=Role(command.actor))
    repo.add(order)
    logger.info(
        "order_status_changed",
        order_number=order.number,
        tracking_code=order.tracking_code,
        from_status=previous,
        to_status=order.status,
    )
    return order.status


@ordering.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(MarkProcessing)
    def mark_processing(self, command):
        return _step(command, OrderStatus.PROCESSING)

    @handle(MarkToShip)
    def mark_to_ship(self, command):
        return _step(command, OrderStatus.TO_SHIP)

    @handle(MarkShipped)
    def mark_shipped(self, command):
        return _step(command, OrderStatus.SHIPPED)
