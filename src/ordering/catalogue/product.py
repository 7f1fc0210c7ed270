"""Product aggregate: a shoe in the catalog, with its stock count.

Stock is only moved by the order lifecycle (decremented at checkout,
incremented on cancellation); staff edit everything else through the
inventory commands. A product that has ever been ordered is withdrawn
(hidden) instead of deleted so that historical orders keep their reference.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from ordering.catalogue.events import (
    ProductAdded,
    ProductRevised,
    ProductWithdrawn,
    StockAdjusted,
)
from ordering.domain import ordering, setting
from ordering.errors import InsufficientStock, StockShortfall
from ordering.utils.queries import iterate

_WEB_SCHEMES = ("http://", "https://")


def split_options(value) -> list[str]:
    """Normalise a comma-delimited option list: trimmed, empties dropped."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(option).strip() for option in value if str(option).strip()]


def default_image() -> str:
    return setting("DEFAULT_IMAGE", "default_shoe_image.jpg")


def normalise_image(image) -> str:
    """Fall back to the default image when none is given; reject non-web URLs."""
    image = (image or "").strip()
    if not image:
        return default_image()
    if "://" in image and not image.lower().startswith(_WEB_SCHEMES):
        raise ValidationError({"image": ["Image URL must start with http:// or https://"]})
    return image


def _validate_listing(name, price, stock):
    errors = {}
    if not name or not str(name).strip():
        errors["name"] = ["Product name cannot be empty"]
    if price is None or price <= 0:
        errors["price"] = ["Price must be greater than 0"]
    if stock is None or stock < 0:
        errors["stock"] = ["Stock cannot be negative"]
    if errors:
        raise ValidationError(errors)


@ordering.aggregate
class Product:
    name = String(required=True, max_length=150)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0)
    colors = String(max_length=255, default="")
    sizes = String(max_length=255, default="")
    image = String(max_length=500)
    available = Boolean(default=True)
    has_order_history = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_go_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def add(cls, name, price, stock, colors=None, sizes=None, image=None, available=True, product_id=None):
        """List a new shoe, validating the fields staff fill in."""
        _validate_listing(name, price, stock)
        now = datetime.now(UTC)
        attributes = dict(
            name=name.strip(),
            price=round(float(price), 2),
            stock=int(stock),
            colors=",".join(split_options(colors)),
            sizes=",".join(split_options(sizes)),
            image=normalise_image(image),
            available=bool(available),
            created_at=now,
            updated_at=now,
        )
        if product_id is not None:
            attributes["id"] = product_id
        product = cls(**attributes)
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Staff edits
    # -------------------------------------------------------------------
    def revise(self, name, price, stock, colors=None, sizes=None, image=None, available=None):
        _validate_listing(name, price, stock)
        self.name = name.strip()
        self.price = round(float(price), 2)
        self.stock = int(stock)
        self.colors = ",".join(split_options(colors))
        self.sizes = ",".join(split_options(sizes))
        self.image = normalise_image(image)
        if available is not None:
            self.available = bool(available)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRevised(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                stock=self.stock,
                available=self.available,
            )
        )

    def withdraw(self):
        """Hide the product from the catalog without losing it."""
        self.available = False
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductWithdrawn(product_id=str(self.id)))

    # -------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------
    @property
    def color_options(self) -> list[str]:
        return split_options(self.colors)

    @property
    def size_options(self) -> list[str]:
        return split_options(self.sizes)

    def check_options(self, color, size):
        """Raise if ``color``/``size`` is not offered. Unlisted options accept anything."""
        errors = {}
        if self.color_options and color not in self.color_options:
            errors["color"] = [f"{self.name} is not available in color {color}"]
        if self.size_options and str(size) not in self.size_options:
            errors["size"] = [f"{self.name} is not available in size {size}"]
        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity):
        """Take ``quantity`` units for a placed order."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.stock:
            raise InsufficientStock(
                [
                    StockShortfall(
                        product_id=str(self.id),
                        name=self.name,
                        requested=quantity,
                        available=self.stock,
                    )
                ]
            )
        self.stock -= quantity
        self.has_order_history = True
        self.updated_at = datetime.now(UTC)
        self.raise_(StockAdjusted(product_id=str(self.id), change=-quantity, stock=self.stock))

    def increment_stock(self, quantity):
        """Return ``quantity`` units from a cancelled order."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self.stock += quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(StockAdjusted(product_id=str(self.id), change=quantity, stock=self.stock))


@ordering.repository(part_of=Product)
class ProductRepository:
    def list_available(self, search=None, color=None, size=None) -> list[Product]:
        """Available products, optionally narrowed by name, color and size."""
        term = (search or "").strip().lower()
        products = []
        for product in iterate(self._dao.query.filter(available=True).order_by("name")):
            if term and term not in product.name.lower():
                continue
            if color and color not in product.color_options:
                continue
            if size and str(size) not in product.size_options:
                continue
            products.append(product)
        return products

    def low_stock(self, threshold=None, limit=None) -> list[Product]:
        """Available products at or under ``threshold`` units, lowest stock first."""
        if threshold is None:
            threshold = setting("LOW_STOCK_THRESHOLD", 10)
        if limit is None:
            limit = setting("LOW_STOCK_LIMIT", 5)
        running_low = [
            product
            for product in iterate(self._dao.query.filter(available=True))
            if product.stock <= threshold
        ]
        running_low.sort(key=lambda product: (product.stock, product.name))
        return running_low[:limit]

    def total_stock(self) -> int:
        return sum(product.stock for product in iterate(self._dao.query))
