"""Persisted shopping cart: one per customer, surviving logout.

The session works on an in-memory ``Cart`` snapshot; this aggregate is its
durable copy, rewritten wholesale every time the snapshot changes.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from ordering.cart.events import CartCleared, CartSaved
from ordering.domain import ordering


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    color = String(max_length=50, default="")
    size = String(max_length=20, default="")
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    @property
    def key(self):
        return (str(self.product_id), self.color or "", str(self.size or ""))


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_row_per_product_color_and_size(self):
        keys = [item.key for item in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A cart holds one line per product, color and size"]})

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    def replace_items(self, lines):
        """Drop every row and store ``lines`` (dicts with product_id, color, size, quantity)."""
        now = datetime.now(UTC)
        if self.items:
            self.remove_items(list(self.items))
        for line in lines:
            self.add_items(
                CartItem(
                    product_id=str(line["product_id"]),
                    color=line.get("color") or "",
                    size=str(line.get("size") or ""),
                    quantity=int(line["quantity"]),
                    added_at=now,
                )
            )
        self.updated_at = now

        self.raise_(
            CartSaved(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                line_count=len(self.items),
                total_quantity=sum(item.quantity for item in self.items),
            )
        )

    def clear(self):
        if self.items:
            self.remove_items(list(self.items))
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), customer_id=str(self.customer_id)))


@ordering.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_by_customer(self, customer_id) -> ShoppingCart | None:
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        if not carts:
            return None
        return self.get(carts[0].id)
