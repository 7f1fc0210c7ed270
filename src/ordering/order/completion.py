"""Order completion: close a shipped order and book the sale together."""

import structlog
from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, order_by_number
from ordering.sales.ledger import SalesRecord
from ordering.session import Role

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class MarkCompleted:
    order_number = Integer(required=True)
    actor = String(choices=Role, default=Role.STAFF.value)


@ordering.command_handler(part_of=Order)
class CompleteOrderHandler:
    @handle(MarkCompleted)
    def mark_completed(self, command):
        order = order_by_number(command.order_number)
        order.complete(actor=Role(command.actor))
        sale = SalesRecord.record(order)

        current_domain.repository_for(Order).add(order)
        current_domain.repository_for(SalesRecord).add(sale)

        logger.info(
            "order_completed",
            order_number=order.number,
            tracking_code=order.tracking_code,
            amount=sale.amount,
        )
        return order.status
