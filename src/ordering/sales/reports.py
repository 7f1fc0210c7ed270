"""Staff reporting: daily sales over a date range and the dashboard summary."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.order.order import Order, OrderStatus
from ordering.sales.ledger import SalesRecord


@dataclass(frozen=True)
class SalesDay:
    day: date
    orders: int
    revenue: float
    average: float

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "orders": self.orders,
            "revenue": self.revenue,
            "average": self.average,
        }


@dataclass(frozen=True)
class SalesReport:
    start: date
    end: date
    days: list[SalesDay] = field(default_factory=list)

    @property
    def total_orders(self) -> int:
        return sum(day.orders for day in self.days)

    @property
    def total_revenue(self) -> float:
        return round(sum(day.revenue for day in self.days), 2)

    @property
    def average(self) -> float:
        return round(self.total_revenue / self.total_orders, 2) if self.total_orders else 0.0

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "days": [day.to_dict() for day in self.days],
            "total": {
                "orders": self.total_orders,
                "revenue": self.total_revenue,
                "average": self.average,
            },
        }


@dataclass(frozen=True)
class Dashboard:
    total_orders: int
    pending_orders: int
    total_sales: float
    total_stock: int
    low_stock: list = field(default_factory=list)


def sales_report(start: date, end: date) -> SalesReport:
    """Completed sales per day between ``start`` and ``end`` inclusive, newest day first.

    An ``end`` before ``start`` is moved up to ``start``.
    """
    if end < start:
        end = start

    by_day = defaultdict(list)
    for record in current_domain.repository_for(SalesRecord).recorded_between(start, end):
        by_day[record.recorded_at.date()].append(record.amount)

    days = [
        SalesDay(
            day=day,
            orders=len(amounts),
            revenue=round(sum(amounts), 2),
            average=round(sum(amounts) / len(amounts), 2),
        )
        for day, amounts in sorted(by_day.items(), reverse=True)
    ]
    return SalesReport(start=start, end=end, days=days)


def dashboard() -> Dashboard:
    orders = current_domain.repository_for(Order)
    products = current_domain.repository_for(Product)
    return Dashboard(
        total_orders=orders.count_orders(),
        pending_orders=orders.count_orders(OrderStatus.PENDING),
        total_sales=current_domain.repository_for(SalesRecord).total_amount(),
        total_stock=products.total_stock(),
        low_stock=products.low_stock(),
    )
