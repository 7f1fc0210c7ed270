"""Error taxonomy for catalog, cart and order operations.

Every error extends one of Protean's exception types so that handlers
registered for the framework exceptions keep working, while callers that
care can catch the specific subclass and read its structured detail.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError


@dataclass(frozen=True)
class StockShortfall:
    """One cart or order line that asks for more units than are on hand."""

    product_id: str
    name: str
    requested: int
    available: int
    color: str = ""
    size: str = ""

    @property
    def message(self) -> str:
        return f"{self.name} only has {self.available} units available."

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "color": self.color,
            "size": self.size,
            "requested": self.requested,
            "available": self.available,
            "message": self.message,
        }


class NotFound(ObjectNotFoundError):
    """An unknown product or order, or an order the caller may not see."""

    def __init__(self, entity: str, identifier, message: str | None = None):
        self.entity = entity
        self.identifier = identifier
        self.message = message or f"{entity} {identifier} not found"
        super().__init__({entity.lower(): [self.message]})
        self.messages = {entity.lower(): [self.message]}

    def __str__(self):
        return self.message


class OutOfStock(ValidationError):
    """Requested quantity is not a positive number or exceeds live stock."""

    def __init__(self, shortfalls=(), message: str | None = None):
        self.shortfalls = list(shortfalls)
        if message is None:
            message = " ".join(shortfall.message for shortfall in self.shortfalls)
        self.message = message
        super().__init__({"stock": [s.message for s in self.shortfalls] or [message]})

    def __str__(self):
        return self.message


class InsufficientStock(OutOfStock):
    """Checkout found one or more lines that live stock cannot cover."""


class EmptyCart(ValidationError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        self.message = "Your cart is empty"
        super().__init__({"cart": [self.message]})

    def __str__(self):
        return self.message


class InvalidTransition(ValidationError):
    """The order cannot move from its current status to the requested one."""

    def __init__(self, order_number, current: str, target: str, reason: str | None = None):
        self.order_number = order_number
        self.current = current
        self.target = target
        self.message = reason or f"Order {order_number} cannot move from {current} to {target}"
        super().__init__({"status": [self.message]})

    def __str__(self):
        return self.message


class AccessDenied(ValidationError):
    """A customer attempted a staff-only operation."""

    def __init__(self, operation: str):
        self.operation = operation
        self.message = f"Staff access is required to {operation}"
        super().__init__({"role": [self.message]})

    def __str__(self):
        return self.message


class TransactionFailure(Exception):
    """A unit of work failed to commit and was rolled back."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        self.message = f"{operation} failed and was rolled back"
        if cause is not None:
            self.message = f"{self.message}: {cause}"
        super().__init__(self.message)
