"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartSaved:
    """The customer's cart lines were replaced with the session cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    line_count = Integer(required=True)
    total_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """All persisted lines were dropped, on checkout or explicit clear."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
