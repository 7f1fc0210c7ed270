"""Application tests for the sales report and the staff dashboard."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.cart.manager import cart_manager
from ordering.order.lifecycle import order_lifecycle
from ordering.sales.ledger import SalesRecord
from ordering.sales.reports import dashboard, sales_report
from protean import current_domain


@pytest.fixture()
def today():
    return datetime.now(UTC).date()


def _complete(customer, staff, product_id="prod-a", quantity=1):
    cart_manager.add_item(customer, product_id, "Black", "9", quantity)
    receipt = order_lifecycle.place_order(customer)
    for _ in range(4):
        order_lifecycle.advance(staff, receipt.number)
    return receipt


def _book(order_number, amount, recorded_at):
    current_domain.repository_for(SalesRecord).add(
        SalesRecord(
            order_id=f"order-{order_number}",
            order_number=order_number,
            amount=amount,
            recorded_at=recorded_at,
        )
    )


class TestSalesReport:
    def test_completed_orders_are_reported(self, customer, staff, shoes, today):
        first = _complete(customer, staff)
        second = _complete(customer, staff, "prod-b", 2)

        report = sales_report(today, today)

        assert len(report.days) == 1
        day = report.days[0]
        assert day.day == today
        assert day.orders == 2
        assert day.revenue == round(first.total + second.total, 2)
        assert day.average == round((first.total + second.total) / 2, 2)

    def test_pending_and_cancelled_orders_are_not_sales(self, customer, staff, shoes, today):
        cart_manager.add_item(customer, "prod-a", "Black", "9", 1)
        order_lifecycle.place_order(customer)
        cart_manager.add_item(customer, "prod-a", "Black", "9", 1)
        cancelled = order_lifecycle.place_order(customer)
        order_lifecycle.cancel_order(customer, cancelled.number)

        assert sales_report(today, today).days == []

    def test_days_newest_first_with_totals(self, today):
        now = datetime.now(UTC)
        _book(1, 100.0, now - timedelta(days=2))
        _book(2, 50.0, now - timedelta(days=2))
        _book(3, 30.0, now)
        _book(4, 999.0, now - timedelta(days=40))

        report = sales_report(today - timedelta(days=7), today)

        assert [day.day for day in report.days] == [today, today - timedelta(days=2)]
        assert [day.revenue for day in report.days] == [30.0, 150.0]
        assert report.days[1].average == 75.0
        assert report.total_orders == 3
        assert report.total_revenue == 180.0
        assert report.average == 60.0

    def test_end_before_start_is_clamped(self, today):
        report = sales_report(today, today - timedelta(days=5))
        assert report.end == report.start == today

    def test_empty_range(self, today):
        report = sales_report(today, today)
        assert report.total_orders == 0
        assert report.average == 0.0
        assert report.to_dict()["total"] == {"orders": 0, "revenue": 0.0, "average": 0.0}

    def test_to_dict(self, today):
        _book(1, 20.0, datetime.now(UTC))
        data = sales_report(today, today).to_dict()
        assert data["days"] == [{"day": today.isoformat(), "orders": 1, "revenue": 20.0, "average": 20.0}]


class TestDashboard:
    def test_dashboard_summary(self, customer, staff, shoes):
        completed = _complete(customer, staff)
        cart_manager.add_item(customer, "prod-b", "Black", "9", 1)
        order_lifecycle.place_order(customer)

        summary = dashboard()

        assert summary.total_orders == 2
        assert summary.pending_orders == 1
        assert summary.total_sales == completed.total
        assert summary.total_stock == 4 + 2
        assert [product.name for product in summary.low_stock] == ["Puma RS-X", "Nike Air Max"]

    def test_empty_shop(self):
        summary = dashboard()
        assert (summary.total_orders, summary.pending_orders, summary.total_sales, summary.total_stock) == (0, 0, 0, 0)
        assert summary.low_stock == []
