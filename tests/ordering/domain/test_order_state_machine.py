"""Tests for the order status state machine and who may drive it."""

import pytest
from ordering.errors import InvalidTransition
from ordering.order.events import (
    OrderCancelled,
    OrderCompleted,
    OrderProcessing,
    OrderReadyToShip,
    OrderShipped,
)
from ordering.order.order import Order, OrderStatus, pipeline_position
from ordering.session import Role


def _order(status=OrderStatus.PENDING, customer_id="cust-001"):
    order = Order.place(
        number=7,
        customer_id=customer_id,
        lines=[{"product_id": "p1", "name": "Shoe", "quantity": 1, "unit_price": 50.0}],
    )
    order.status = status.value
    order._events.clear()
    return order


class TestHappyPath:
    def test_full_pipeline(self):
        order = _order()

        order.mark_processing()
        assert order.status == OrderStatus.PROCESSING.value
        order.mark_to_ship()
        assert order.status == OrderStatus.TO_SHIP.value
        order.mark_shipped()
        assert order.status == OrderStatus.SHIPPED.value
        order.complete()
        assert order.status == OrderStatus.COMPLETED.value

        assert [type(event) for event in order._events] == [
            OrderProcessing,
            OrderReadyToShip,
            OrderShipped,
            OrderCompleted,
        ]

    def test_completed_event_carries_total(self):
        order = _order(OrderStatus.SHIPPED)
        order.complete()
        assert order._events[-1].total == 50.0


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "status, method",
        [
            (OrderStatus.PENDING, "mark_to_ship"),
            (OrderStatus.PENDING, "mark_shipped"),
            (OrderStatus.PENDING, "complete"),
            (OrderStatus.PROCESSING, "mark_shipped"),
            (OrderStatus.PROCESSING, "complete"),
            (OrderStatus.TO_SHIP, "mark_processing"),
            (OrderStatus.TO_SHIP, "complete"),
            (OrderStatus.SHIPPED, "mark_processing"),
            (OrderStatus.COMPLETED, "mark_processing"),
            (OrderStatus.CANCELLED, "mark_processing"),
            (OrderStatus.CANCELLED, "complete"),
        ],
    )
    def test_skipping_or_reversing_is_rejected(self, status, method):
        order = _order(status)

        with pytest.raises(InvalidTransition) as exc:
            getattr(order, method)()

        assert exc.value.current == status.value
        assert order.status == status.value

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.TO_SHIP, OrderStatus.SHIPPED, OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    )
    def test_cancel_rejected_once_shipping_started_or_terminal(self, status):
        order = _order(status)

        with pytest.raises(InvalidTransition) as exc:
            order.cancel(actor=Role.STAFF, requested_by="staff-001")

        assert exc.value.target == OrderStatus.CANCELLED.value
        assert order.status == status.value

    def test_error_names_order_current_and_target(self):
        order = _order(OrderStatus.SHIPPED)

        with pytest.raises(InvalidTransition) as exc:
            order.mark_processing()

        assert exc.value.order_number == 7
        assert "Shipped" in str(exc.value)
        assert "Processing" in str(exc.value)


class TestActors:
    def test_customer_cancels_own_pending_order(self):
        order = _order()
        order.cancel(actor=Role.CUSTOMER, requested_by="cust-001")

        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == Role.CUSTOMER.value
        assert isinstance(order._events[-1], OrderCancelled)

    def test_customer_cannot_cancel_processing_order(self):
        order = _order(OrderStatus.PROCESSING)

        with pytest.raises(InvalidTransition):
            order.cancel(actor=Role.CUSTOMER, requested_by="cust-001")

    def test_staff_cancels_processing_order(self):
        order = _order(OrderStatus.PROCESSING)
        order.cancel(actor=Role.STAFF, requested_by="staff-001")

        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == Role.STAFF.value

    def test_customer_cannot_cancel_someone_elses_order(self):
        order = _order(customer_id="cust-002")

        with pytest.raises(InvalidTransition) as exc:
            order.cancel(actor=Role.CUSTOMER, requested_by="cust-001")

        assert "does not belong to you" in str(exc.value)
        assert order.status == OrderStatus.PENDING.value

    @pytest.mark.parametrize("method", ["mark_processing", "mark_to_ship", "mark_shipped", "complete"])
    def test_customers_cannot_move_orders_forward(self, method):
        order = _order()
        with pytest.raises(InvalidTransition):
            getattr(order, method)(actor=Role.CUSTOMER)


class TestPipelineHelpers:
    @pytest.mark.parametrize(
        "status, expected",
        [
            (OrderStatus.PENDING, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.TO_SHIP),
            (OrderStatus.TO_SHIP, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.COMPLETED),
            (OrderStatus.COMPLETED, None),
            (OrderStatus.CANCELLED, None),
        ],
    )
    def test_next_status(self, status, expected):
        assert _order(status).next_status() == expected

    def test_pipeline_position_orders_statuses(self):
        positions = [pipeline_position(status) for status in ("Pending", "Processing", "To Ship", "Shipped")]
        assert positions == [1, 2, 3, 4]

    def test_terminal_statuses(self):
        assert _order(OrderStatus.COMPLETED).is_terminal
        assert _order(OrderStatus.CANCELLED).is_terminal
        assert not _order(OrderStatus.SHIPPED).is_terminal
