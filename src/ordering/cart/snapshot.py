"""Immutable in-memory cart snapshots and the cart merge rule."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CartLine:
    """One (product, color, size) entry, priced from the catalog when it was added."""

    product_id: str
    color: str
    size: str
    quantity: int
    name: str = ""
    unit_price: float = 0.0

    @property
    def key(self) -> tuple[str, str, str]:
        return (str(self.product_id), self.color, str(self.size))

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "color": self.color,
            "size": str(self.size),
            "quantity": self.quantity,
            "name": self.name,
            "unit_price": self.unit_price,
        }


@dataclass(frozen=True)
class Cart:
    lines: tuple[CartLine, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> float:
        return round(sum(line.unit_price * line.quantity for line in self.lines), 2)

    def line_for(self, product_id, color, size) -> CartLine | None:
        key = (str(product_id), color, str(size))
        return next((line for line in self.lines if line.key == key), None)

    def quantity_of(self, product_id, color, size) -> int:
        line = self.line_for(product_id, color, size)
        return line.quantity if line else 0

    def with_line(self, line: CartLine) -> "Cart":
        """Replace the line with the same key in place, or append it."""
        if any(existing.key == line.key for existing in self.lines):
            return Cart(tuple(line if existing.key == line.key else existing for existing in self.lines))
        return Cart(self.lines + (line,))

    def without(self, product_id, color, size) -> "Cart":
        key = (str(product_id), color, str(size))
        return Cart(tuple(line for line in self.lines if line.key != key))

    def to_list(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]


def merge(cart_a: Cart, cart_b: Cart) -> Cart:
    """Combine two carts, summing quantities of lines that share a key.

    Lines of ``cart_a`` keep their order; lines only in ``cart_b`` follow in
    ``cart_b`` order. When either side is empty the other is returned as is.
    """
    if cart_a.is_empty:
        return cart_b
    if cart_b.is_empty:
        return cart_a

    merged = list(cart_a.lines)
    positions = {line.key: index for index, line in enumerate(merged)}
    for line in cart_b.lines:
        if line.key in positions:
            index = positions[line.key]
            merged[index] = replace(merged[index], quantity=merged[index].quantity + line.quantity)
        else:
            positions[line.key] = len(merged)
            merged.append(line)
    return Cart(tuple(merged))
