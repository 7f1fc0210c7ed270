"""FastAPI routes for the ordering service: products, cart, orders and reports.

The caller's identity arrives in the ``X-User-Id`` and ``X-User-Role``
headers; each request resumes a ``ShopperSession`` from it and hands that to
the service layer.
"""

from datetime import UTC, date, datetime, timedelta

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    DashboardResponse,
    DeleteProductResponse,
    OrderResponse,
    ProductIdResponse,
    ProductRequest,
    ProductResponse,
    ReceiptResponse,
    SalesReportResponse,
    StatusResponse,
    UpdateStatusRequest,
)
from ordering.cart.manager import cart_manager
from ordering.catalogue import catalog
from ordering.order.lifecycle import order_lifecycle
from ordering.order.order import OrderStatus
from ordering.sales import reports
from ordering.session import Role, ShopperSession
from ordering.utils.logging import bind_actor


async def current_session(
    x_user_id: str = Header(...),
    x_user_role: str = Header(default=Role.CUSTOMER.value),
) -> ShopperSession:
    try:
        role = Role(x_user_role.capitalize())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role {x_user_role}") from None
    bind_actor(x_user_id, role.value)
    return cart_manager.open_session(x_user_id, role)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products(
    search: str | None = None,
    color: str | None = None,
    size: str | None = None,
) -> list[ProductResponse]:
    products = catalog.list_available(search=search, color=color, size=size)
    return [ProductResponse.from_product(product) for product in products]


@product_router.get("/low-stock", response_model=list[ProductResponse])
async def low_stock_products(
    threshold: int | None = None,
    limit: int | None = None,
    session: ShopperSession = Depends(current_session),
) -> list[ProductResponse]:
    session.require_staff("view stock alerts")
    return [ProductResponse.from_product(product) for product in catalog.low_stock(threshold, limit)]


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: ProductRequest, session: ShopperSession = Depends(current_session)) -> ProductIdResponse:
    product_id = catalog.add_product(
        session,
        name=body.name,
        price=body.price,
        stock=body.stock,
        colors=body.colors,
        sizes=body.sizes,
        image=body.image,
        available=body.available,
    )
    return ProductIdResponse(product_id=product_id)


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductRequest,
    session: ShopperSession = Depends(current_session),
) -> ProductResponse:
    product = catalog.update_product(
        session,
        product_id,
        name=body.name,
        price=body.price,
        stock=body.stock,
        colors=body.colors,
        sizes=body.sizes,
        image=body.image,
        available=body.available,
    )
    return ProductResponse.from_product(product)


@product_router.delete("/{product_id}", response_model=DeleteProductResponse)
async def delete_product(product_id: str, session: ShopperSession = Depends(current_session)) -> DeleteProductResponse:
    mode = catalog.delete_product(session, product_id)
    return DeleteProductResponse(product_id=product_id, mode=mode)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def view_cart(session: ShopperSession = Depends(current_session)) -> CartResponse:
    return CartResponse.from_cart(session.cart)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, session: ShopperSession = Depends(current_session)) -> CartResponse:
    cart = cart_manager.add_item(session, body.product_id, body.color, body.size, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(session: ShopperSession = Depends(current_session)) -> CartResponse:
    return CartResponse.from_cart(cart_manager.remove_all(session))


@cart_router.post("/checkout", status_code=201, response_model=ReceiptResponse)
async def checkout(session: ShopperSession = Depends(current_session)) -> ReceiptResponse:
    receipt = order_lifecycle.place_order(session)
    return ReceiptResponse(
        order_id=receipt.order_id,
        number=receipt.number,
        tracking_code=receipt.tracking_code,
        total=receipt.total,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/active", response_model=list[OrderResponse])
async def active_orders(session: ShopperSession = Depends(current_session)) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in order_lifecycle.active_orders(session)]


@order_router.get("/history", response_model=list[OrderResponse])
async def order_history(session: ShopperSession = Depends(current_session)) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in order_lifecycle.order_history(session)]


@order_router.get("/queue", response_model=list[OrderResponse])
async def order_queue(session: ShopperSession = Depends(current_session)) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in order_lifecycle.staff_queue(session)]


@order_router.get("/track/{tracking_code}", response_model=OrderResponse)
async def track_order(tracking_code: str, session: ShopperSession = Depends(current_session)) -> OrderResponse:
    return OrderResponse.from_order(order_lifecycle.track(session, tracking_code))


@order_router.put("/{number}/advance", response_model=StatusResponse)
async def advance_order(number: int, session: ShopperSession = Depends(current_session)) -> StatusResponse:
    status = order_lifecycle.advance(session, number)
    return StatusResponse(number=number, status=status.value)


@order_router.put("/{number}/status", response_model=StatusResponse)
async def update_order_status(
    number: int,
    body: UpdateStatusRequest,
    session: ShopperSession = Depends(current_session),
) -> StatusResponse:
    try:
        target = OrderStatus(body.status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown order status {body.status}") from None
    status = order_lifecycle.move_to(session, number, target)
    return StatusResponse(number=number, status=status.value)


@order_router.put("/{number}/cancel", response_model=StatusResponse)
async def cancel_order(number: int, session: ShopperSession = Depends(current_session)) -> StatusResponse:
    status = order_lifecycle.cancel_order(session, number)
    return StatusResponse(number=number, status=status.value)


# ---------------------------------------------------------------------------
# Report Router
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"])


@report_router.get("/sales", response_model=SalesReportResponse)
async def sales_report(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    session: ShopperSession = Depends(current_session),
) -> SalesReportResponse:
    session.require_staff("view sales reports")
    end = end or datetime.now(UTC).date()
    start = start or end - timedelta(days=30)
    return SalesReportResponse(**reports.sales_report(start, end).to_dict())


@report_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(session: ShopperSession = Depends(current_session)) -> DashboardResponse:
    session.require_staff("view the dashboard")
    summary = reports.dashboard()
    return DashboardResponse(
        total_orders=summary.total_orders,
        pending_orders=summary.pending_orders,
        total_sales=summary.total_sales,
        total_stock=summary.total_stock,
        low_stock=[ProductResponse.from_product(product) for product in summary.low_stock],
    )
