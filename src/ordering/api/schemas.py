"""Pydantic request/response schemas for the ordering API.

These are external contracts, kept separate from the Protean commands and
aggregates they are translated into.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class ProductRequest(BaseModel):
    name: str
    price: float
    stock: int
    colors: list[str] | str | None = None
    sizes: list[str] | str | None = None
    image: str | None = None
    available: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Nike Air Max",
                    "price": 129.99,
                    "stock": 50,
                    "colors": ["Black", "White", "Blue"],
                    "sizes": ["7", "8", "9", "10", "11", "12"],
                    "image": None,
                    "available": True,
                }
            ]
        }
    }


class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    stock: int
    colors: list[str]
    sizes: list[str]
    image: str | None = None
    available: bool

    @classmethod
    def from_product(cls, product):
        return cls(
            product_id=str(product.id),
            name=product.name,
            price=product.price,
            stock=product.stock,
            colors=product.color_options,
            sizes=product.size_options,
            image=product.image,
            available=product.available,
        )


class ProductIdResponse(BaseModel):
    product_id: str


class DeleteProductResponse(BaseModel):
    product_id: str
    mode: str


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    color: str = ""
    size: str = ""
    quantity: int = 1


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    color: str
    size: str
    quantity: int
    unit_price: float
    line_total: float


class CartResponse(BaseModel):
    lines: list[CartLineResponse]
    total_quantity: int
    total: float

    @classmethod
    def from_cart(cls, cart):
        return cls(
            lines=[
                CartLineResponse(
                    product_id=line.product_id,
                    name=line.name,
                    color=line.color,
                    size=line.size,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in cart.lines
            ],
            total_quantity=cart.total_quantity,
            total=cart.total,
        )


class ReceiptResponse(BaseModel):
    order_id: str
    number: int
    tracking_code: str
    total: float


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    color: str
    size: str
    quantity: int
    unit_price: float


class OrderResponse(BaseModel):
    order_id: str
    number: int
    tracking_code: str
    customer_id: str
    status: str
    total: float
    items: list[OrderItemResponse]

    @classmethod
    def from_order(cls, order):
        return cls(
            order_id=str(order.id),
            number=order.number,
            tracking_code=order.tracking_code,
            customer_id=str(order.customer_id),
            status=order.status,
            total=order.total,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    color=item.color or "",
                    size=item.size or "",
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
        )


class UpdateStatusRequest(BaseModel):
    status: str = Field(examples=["Processing"])


class StatusResponse(BaseModel):
    number: int
    status: str


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
class SalesDayResponse(BaseModel):
    day: date
    orders: int
    revenue: float
    average: float


class SalesTotalResponse(BaseModel):
    orders: int
    revenue: float
    average: float


class SalesReportResponse(BaseModel):
    start: date
    end: date
    days: list[SalesDayResponse]
    total: SalesTotalResponse


class DashboardResponse(BaseModel):
    total_orders: int
    pending_orders: int
    total_sales: float
    total_stock: int
    low_stock: list[ProductResponse]
