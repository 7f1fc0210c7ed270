"""Order aggregate: the core of the ordering domain.

An order is created at checkout with its items and an immutable total, then
moves through a linear fulfilment pipeline. It is never deleted.

State Machine:
    PENDING → PROCESSING → TO_SHIP → SHIPPED → COMPLETED
    CANCELLED (from PENDING by customer or staff, from PROCESSING by staff)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import InvalidTransition, NotFound
from ordering.order.events import (
    OrderCancelled,
    OrderCompleted,
    OrderPlaced,
    OrderProcessing,
    OrderReadyToShip,
    OrderShipped,
)
from ordering.order.tracking import format_tracking_code
from ordering.session import Role
from ordering.utils.queries import count, iterate


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    TO_SHIP = "To Ship"
    SHIPPED = "Shipped"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.TO_SHIP, OrderStatus.CANCELLED},
    OrderStatus.TO_SHIP: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Who may cancel from which states
_CANCELLABLE_STATES = {
    Role.CUSTOMER: {OrderStatus.PENDING},
    Role.STAFF: {OrderStatus.PENDING, OrderStatus.PROCESSING},
}

PIPELINE = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.TO_SHIP,
    OrderStatus.SHIPPED,
    OrderStatus.COMPLETED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


def pipeline_position(status) -> int:
    """1 for Pending through 5 for Completed; cancelled orders sort last."""
    status = OrderStatus(status)
    if status in PIPELINE:
        return PIPELINE.index(status) + 1
    return len(PIPELINE) + 1


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line of a placed order with the price the customer was charged.

    The unit price is a snapshot; later catalog price changes do not touch it.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=150)
    quantity = Integer(required=True, min_value=1)
    color = String(max_length=50, default="")
    size = String(max_length=20, default="")
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    number = Integer(required=True, min_value=1)
    customer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    total = Float(required=True, min_value=0.0)
    cancelled_by = String(choices=Role, max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_items(self):
        if not self.items:
            return
        expected = round(sum(item.unit_price * item.quantity for item in self.items), 2)
        if abs(expected - self.total) > 0.005:
            raise ValidationError({"total": [f"Order total {self.total} does not match its items ({expected})"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, number, customer_id, lines):
        """Create a pending order from checkout lines.

        Args:
            number: The order number allocated for this order.
            customer_id: The customer checking out.
            lines: Dicts with product_id, name, quantity, color, size and
                unit_price (the price captured in the cart).
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(line["product_id"]),
                product_name=line["name"],
                quantity=int(line["quantity"]),
                color=line.get("color") or "",
                size=str(line.get("size") or ""),
                unit_price=float(line["unit_price"]),
            )
            for line in lines
        ]
        total = round(sum(item.unit_price * item.quantity for item in items), 2)

        order = cls(
            number=number,
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            items=items,
            total=total,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=number,
                customer_id=str(customer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": item.product_id,
                            "quantity": item.quantity,
                            "color": item.color,
                            "size": item.size,
                            "unit_price": item.unit_price,
                        }
                        for item in items
                    ]
                ),
                total=total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def tracking_code(self) -> str:
        return format_tracking_code(self.number)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def next_status(self):
        """The next pipeline status, or None once the order is terminal."""
        current = OrderStatus(self.status)
        if current not in PIPELINE or current == OrderStatus.COMPLETED:
            return None
        return PIPELINE[PIPELINE.index(current) + 1]

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status, actor=Role.STAFF):
        """Validate that ``actor`` may move the order from its current state to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(self.number, current.value, target_status.value)
        if target_status == OrderStatus.CANCELLED:
            if current not in _CANCELLABLE_STATES[actor]:
                raise InvalidTransition(
                    self.number,
                    current.value,
                    target_status.value,
                    reason=f"Order {self.tracking_code} is {current.value} and can no longer be cancelled",
                )
        elif actor != Role.STAFF:
            raise InvalidTransition(
                self.number,
                current.value,
                target_status.value,
                reason=f"Only staff can move order {self.tracking_code} from {current.value} to {target_status.value}",
            )

    def _move_to(self, target_status):
        self.status = target_status.value
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def mark_processing(self, actor=Role.STAFF):
        self._assert_can_transition(OrderStatus.PROCESSING, actor)
        self._move_to(OrderStatus.PROCESSING)
        self.raise_(OrderProcessing(order_id=str(self.id), order_number=self.number))

    def mark_to_ship(self, actor=Role.STAFF):
        self._assert_can_transition(OrderStatus.TO_SHIP, actor)
        self._move_to(OrderStatus.TO_SHIP)
        self.raise_(OrderReadyToShip(order_id=str(self.id), order_number=self.number))

    def mark_shipped(self, actor=Role.STAFF):
        self._assert_can_transition(OrderStatus.SHIPPED, actor)
        self._move_to(OrderStatus.SHIPPED)
        self.raise_(OrderShipped(order_id=str(self.id), order_number=self.number))

    def complete(self, actor=Role.STAFF):
        """Close the order. The caller records the sale in the same unit of work."""
        self._assert_can_transition(OrderStatus.COMPLETED, actor)
        self._move_to(OrderStatus.COMPLETED)
        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                order_number=self.number,
                total=self.total,
                completed_at=self.updated_at,
            )
        )

    def cancel(self, actor=Role.CUSTOMER, requested_by=None):
        """Cancel the order. The caller returns each item's stock in the same unit of work."""
        current = OrderStatus(self.status)
        if actor == Role.CUSTOMER and not self.belongs_to(requested_by):
            raise InvalidTransition(
                self.number,
                current.value,
                OrderStatus.CANCELLED.value,
                reason=f"Order {self.tracking_code} does not belong to you",
            )
        self._assert_can_transition(OrderStatus.CANCELLED, actor)
        self._move_to(OrderStatus.CANCELLED)
        self.cancelled_by = actor.value
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.number,
                cancelled_by=actor.value,
                cancelled_at=self.updated_at,
            )
        )


@ordering.repository(part_of=Order)
class OrderRepository:
    def next_number(self) -> int:
        latest = self._dao.query.order_by("-number").limit(1).all().items
        return latest[0].number + 1 if latest else 1

    def find_by_number(self, number) -> Order | None:
        found = self._dao.query.filter(number=int(number)).all().items
        if not found:
            return None
        return self.get(found[0].id)

    def for_customer(self, customer_id) -> list[Order]:
        """The customer's orders, newest first."""
        records = iterate(self._dao.query.filter(customer_id=str(customer_id)).order_by("-number"))
        return [self.get(record.id) for record in records]

    def in_progress(self) -> list[Order]:
        """Every non-terminal order, by pipeline position then newest first."""
        records = [
            record
            for record in iterate(self._dao.query.order_by("-number"))
            if OrderStatus(record.status) not in TERMINAL_STATUSES
        ]
        records.sort(key=lambda record: pipeline_position(record.status))
        return [self.get(record.id) for record in records]

    def count_orders(self, status=None) -> int:
        queryset = self._dao.query
        if status is not None:
            queryset = queryset.filter(status=OrderStatus(status).value)
        return count(queryset)


def order_by_number(number) -> Order:
    order = current_domain.repository_for(Order).find_by_number(number)
    if order is None:
        raise NotFound("Order", format_tracking_code(number))
    return order
