"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer checked out; stock has been taken for every line."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, color, size, unit_price}
    total = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderProcessing:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)


@ordering.event(part_of="Order")
class OrderReadyToShip:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)


@ordering.event(part_of="Order")
class OrderCompleted:
    """The order reached its final state and was recorded as a sale."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    total = Float(required=True)
    completed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock returned to the catalog."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    cancelled_by = String(required=True, max_length=50)
    cancelled_at = DateTime(required=True)
