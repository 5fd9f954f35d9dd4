# Overview: Read-only projections over items, orders and stock history.

from __future__ import annotations

from datetime import timedelta

from sqlalchemy import func

from ..models import Item, Order, StockHistoryRecord
from ..store import PersistentStore
from ..time_utils import parse_range_bound, start_of_day, to_utc_z, utcnow
from ..validation import ValidationError, validate_stock_type
from .inventory_service import DEFAULT_LOW_STOCK_THRESHOLD, InventoryLedger
from .order_service import OrderProcessor

RECENT_ORDER_LIMIT = 5


def _parse_bound(value, name: str, *, end: bool = False):
    if value is None:
        return None
    try:
        return parse_range_bound(str(value), end=end)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 date or datetime")


class ReportingService:
    """Pure reads; nothing here opens a transaction."""

    def __init__(
        self,
        store: PersistentStore,
        ledger: InventoryLedger | None = None,
        orders: OrderProcessor | None = None,
    ):
        self.store = store
        self.ledger = ledger or InventoryLedger(store)
        self.orders = orders or OrderProcessor(store)

    def stock_history(
        self,
        item_name: str | None = None,
        movement: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[StockHistoryRecord]:
        """
        Stock movements, newest first.

        Filters are optional and combine with AND. The created_at range is
        inclusive on both ends; a date-only date_to covers that whole day.
        """
        q = self.store.query(StockHistoryRecord)

        if item_name and item_name.strip():
            needle = item_name.strip().lower()
            q = q.filter(func.lower(StockHistoryRecord.item_name).contains(needle, autoescape=True))

        if movement:
            q = q.filter(StockHistoryRecord.type == validate_stock_type(movement))

        start = _parse_bound(date_from, "date_from")
        if start is not None:
            q = q.filter(StockHistoryRecord.created_at >= start)

        end = _parse_bound(date_to, "date_to", end=True)
        if end is not None:
            q = q.filter(StockHistoryRecord.created_at <= end)

        return q.order_by(
            StockHistoryRecord.created_at.desc(),
            StockHistoryRecord.id.desc(),
        ).all()

    def item_history(self, item_id: str) -> list[StockHistoryRecord]:
        return (
            self.store.query(StockHistoryRecord)
            .filter(StockHistoryRecord.item_id == item_id)
            .order_by(StockHistoryRecord.created_at.desc(), StockHistoryRecord.id.desc())
            .all()
        )

    def dashboard_summary(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> dict:
        total_items = self.store.query(func.count(Item.id)).scalar() or 0
        total_value = self.store.query(
            func.coalesce(func.sum(Item.price * Item.quantity), 0)
        ).scalar()

        now = utcnow()
        today_start = start_of_day(now.date())
        tomorrow_start = today_start + timedelta(days=1)
        today_orders, today_sales = self.store.query(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
        ).filter(
            Order.created_at >= today_start,
            Order.created_at < tomorrow_start,
        ).one()

        return {
            "as_of": to_utc_z(now),
            "total_items": int(total_items),
            "total_stock_value": round(float(total_value or 0), 2),
            "low_stock_count": len(self.ledger.low_stock_items(threshold)),
            "today_orders": int(today_orders or 0),
            "today_sales_total": round(float(today_sales or 0), 2),
            "recent_orders": self.orders.list_orders()[:RECENT_ORDER_LIMIT],
        }
