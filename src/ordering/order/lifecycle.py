"""Order Lifecycle Engine: the service layer behind checkout, status changes and tracking.

Controllers hand in the ``ShopperSession``; every write goes through
``run_atomically`` so stock-changing units are serialised and storage
failures surface as ``TransactionFailure``.
"""

import json
from dataclasses import dataclass

from protean.utils.globals import current_domain

from ordering.cart.snapshot import Cart
from ordering.errors import EmptyCart, InvalidTransition, NotFound
from ordering.order.cancellation import CancelOrder
from ordering.order.checkout import PlaceOrder
from ordering.order.completion import MarkCompleted
from ordering.order.fulfillment import MarkProcessing, MarkShipped, MarkToShip
from ordering.order.order import Order, OrderStatus, TERMINAL_STATUSES, order_by_number
from ordering.order.tracking import format_tracking_code, parse_tracking_code
from ordering.session import ShopperSession
from ordering.utils.transactions import run_atomically


@dataclass(frozen=True)
class Receipt:
    order_id: str
    number: int
    tracking_code: str
    total: float


_STATUS_COMMANDS = {
    OrderStatus.PROCESSING: MarkProcessing,
    OrderStatus.TO_SHIP: MarkToShip,
    OrderStatus.SHIPPED: MarkShipped,
    OrderStatus.COMPLETED: MarkCompleted,
}


class OrderLifecycle:
    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def place_order(self, session: ShopperSession) -> Receipt:
        """Place the session cart as a new order and empty the cart.

        Raises:
            EmptyCart: the cart has no lines.
            InsufficientStock: one or more lines exceed live stock; nothing
                was written.
        """
        if session.cart.is_empty:
            raise EmptyCart(session.user_id)

        lines = [
            {
                "product_id": line.product_id,
                "name": line.name,
                "color": line.color,
                "size": line.size,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
            }
            for line in session.cart.lines
        ]
        result = run_atomically(
            PlaceOrder(customer_id=session.user_id, lines=json.dumps(lines)),
            serialised=True,
        )
        session.cart = Cart()
        return Receipt(
            order_id=result["order_id"],
            number=result["number"],
            tracking_code=result["tracking_code"],
            total=result["total"],
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def cancel_order(self, session: ShopperSession, order_number) -> OrderStatus:
        status = run_atomically(
            CancelOrder(
                order_number=order_number,
                actor=session.role.value,
                requested_by=session.user_id,
            ),
            serialised=True,
        )
        return OrderStatus(status)

    def mark_processing(self, session: ShopperSession, order_number) -> OrderStatus:
        return self.move_to(session, order_number, OrderStatus.PROCESSING)

    def mark_to_ship(self, session: ShopperSession, order_number) -> OrderStatus:
        return self.move_to(session, order_number, OrderStatus.TO_SHIP)

    def mark_shipped(self, session: ShopperSession, order_number) -> OrderStatus:
        return self.move_to(session, order_number, OrderStatus.SHIPPED)

    def mark_completed(self, session: ShopperSession, order_number) -> OrderStatus:
        return self.move_to(session, order_number, OrderStatus.COMPLETED)

    def advance(self, session: ShopperSession, order_number) -> OrderStatus:
        """Move the order one step along the pipeline."""
        order = order_by_number(order_number)
        target = order.next_status()
        if target is None:
            raise InvalidTransition(
                order.number,
                order.status,
                order.status,
                reason=f"Order {order.tracking_code} is {order.status} and has no next status",
            )
        return self.move_to(session, order_number, target)

    def move_to(self, session: ShopperSession, order_number, status) -> OrderStatus:
        """Request a specific status; cancellation restores stock, completion books the sale."""
        target = OrderStatus(status)
        if target == OrderStatus.CANCELLED:
            return self.cancel_order(session, order_number)
        if target not in _STATUS_COMMANDS:
            order = order_by_number(order_number)
            raise InvalidTransition(order.number, order.status, target.value)

        command = _STATUS_COMMANDS[target](order_number=order_number, actor=session.role.value)
        return OrderStatus(run_atomically(command, serialised=True))

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    def track(self, session: ShopperSession, tracking_code) -> Order:
        """Find an order by tracking code. Customers only see their own orders."""
        number = parse_tracking_code(tracking_code)
        order = current_domain.repository_for(Order).find_by_number(number)
        if order is None or (not session.is_staff and not order.belongs_to(session.user_id)):
            raise NotFound(
                "Order",
                format_tracking_code(number),
                "Order not found or does not belong to you",
            )
        return order

    def active_orders(self, session: ShopperSession) -> list[Order]:
        return [
            order
            for order in current_domain.repository_for(Order).for_customer(session.user_id)
            if OrderStatus(order.status) not in TERMINAL_STATUSES
        ]

    def order_history(self, session: ShopperSession) -> list[Order]:
        return [
            order
            for order in current_domain.repository_for(Order).for_customer(session.user_id)
            if OrderStatus(order.status) in TERMINAL_STATUSES
        ]

    def staff_queue(self, session: ShopperSession) -> list[Order]:
        session.require_staff("view the order queue")
        return current_domain.repository_for(Order).in_progress()


order_lifecycle = OrderLifecycle()
