"""Domain events for the Product aggregate."""

from protean.fields import Boolean, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductAdded:
    """A shoe was added to the catalog by staff."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    price = Float(required=True)
    stock = Integer(required=True)


@ordering.event(part_of="Product")
class ProductRevised:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    price = Float(required=True)
    stock = Integer(required=True)
    available = Boolean(required=True)


@ordering.event(part_of="Product")
class ProductWithdrawn:
    """A product with order history was hidden from the catalog instead of deleted."""

    __version__ = 1

    product_id = Identifier(required=True)


@ordering.event(part_of="Product")
class StockAdjusted:
    """Stock moved because an order was placed or cancelled."""

    __version__ = 1

    product_id = Identifier(required=True)
    change = Integer(required=True)
    stock = Integer(required=True)
