"""Per-session shopper state passed explicitly into every cart and order operation."""

from dataclasses import dataclass, field, replace
from enum import Enum

from ordering.cart.snapshot import Cart
from ordering.errors import AccessDenied


class Role(Enum):
    CUSTOMER = "Customer"
    STAFF = "Staff"


@dataclass
class ShopperSession:
    """Who is acting, and the live cart they are building.

    Staff sessions carry an empty cart that is never persisted.
    """

    user_id: str
    role: Role = Role.CUSTOMER
    cart: Cart = field(default_factory=Cart)
    active: bool = True

    @property
    def is_staff(self) -> bool:
        return self.role == Role.STAFF

    def require_staff(self, operation: str):
        if not self.is_staff:
            raise AccessDenied(operation)

    def closed(self) -> "ShopperSession":
        """A copy with the cart dropped, as left behind by logout."""
        return replace(self, cart=Cart(), active=False)
