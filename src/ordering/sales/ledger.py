"""Sales ledger: one append-only record per completed order."""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, Integer

from ordering.domain import ordering
from ordering.utils.queries import iterate


@ordering.aggregate
class SalesRecord:
    order_id = Identifier(required=True)
    order_number = Integer(required=True, min_value=1)
    amount = Float(required=True, min_value=0.0)
    recorded_at = DateTime(required=True)

    @classmethod
    def record(cls, order):
        """Book the sale for an order that has just been completed."""
        return cls(
            order_id=str(order.id),
            order_number=order.number,
            amount=order.total,
            recorded_at=order.updated_at or datetime.now(UTC),
        )


@ordering.repository(part_of=SalesRecord)
class SalesRecordRepository:
    def for_order(self, order_id) -> list[SalesRecord]:
        return self._dao.query.filter(order_id=str(order_id)).all().items

    def recorded_between(self, start, end) -> list[SalesRecord]:
        """Sales whose recording date falls within ``start``..``end`` inclusive."""
        return [
            record
            for record in iterate(self._dao.query.order_by("-recorded_at"))
            if start <= record.recorded_at.date() <= end
        ]

    def total_amount(self) -> float:
        return round(sum(record.amount for record in iterate(self._dao.query)), 2)
