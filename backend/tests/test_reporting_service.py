"""
Reporting tests: low-stock report, stock history filters, dashboard summary.
"""

from datetime import datetime, timedelta

import pytest

from stockpos.models import StockHistoryRecord
from stockpos.services.reporting_service import ReportingService
from stockpos.time_utils import utcnow
from stockpos.validation import ValidationError


@pytest.fixture
def reports(store, ledger, processor):
    return ReportingService(store, ledger=ledger, orders=processor)


def _backdate(db_session, record_id, when):
    db_session.query(StockHistoryRecord).filter_by(id=record_id).update({"created_at": when})
    db_session.commit()


class TestLowStock:
    def test_min_stock_or_threshold(self, make_item, ledger):
        make_item(name="A", quantity=70, min_stock=20)
        make_item(name="B", quantity=15, min_stock=20)
        make_item(name="C", quantity=5, min_stock=0)

        low = ledger.low_stock_items(10)
        assert [i.name for i in low] == ["C", "B"]

    def test_threshold_bound_is_inclusive(self, make_item, ledger):
        make_item(name="Edge", quantity=10, min_stock=0)
        make_item(name="Above", quantity=11, min_stock=0)
        assert [i.name for i in ledger.low_stock_items(10)] == ["Edge"]

    def test_min_stock_bound_is_inclusive(self, make_item, ledger):
        make_item(name="AtMin", quantity=20, min_stock=20)
        assert [i.name for i in ledger.low_stock_items(0)] == ["AtMin"]


class TestStockHistory:
    def test_newest_first(self, make_item, ledger, reports):
        item = make_item(name="Cola", quantity=10)
        first = ledger.adjust_stock(item.id, 1)
        second = ledger.adjust_stock(item.id, -2)

        records = reports.stock_history()
        assert [r.id for r in records] == [second["history_id"], first["history_id"]]

    def test_filters_combine(self, make_item, ledger, reports):
        cola = make_item(name="Coca Cola", quantity=10)
        bread = make_item(name="Bread", quantity=10)
        ledger.adjust_stock(cola.id, 5)
        ledger.adjust_stock(cola.id, -1)
        ledger.adjust_stock(bread.id, -1)

        assert len(reports.stock_history(item_name="cola")) == 2
        assert len(reports.stock_history(movement="out")) == 2
        only = reports.stock_history(item_name="COLA", movement="out")
        assert [(r.item_name, r.type) for r in only] == [("Coca Cola", "out")]

    def test_item_name_is_a_snapshot(self, make_item, ledger, reports):
        item = make_item(name="Old Name", quantity=10, price=1)
        ledger.adjust_stock(item.id, 1)
        ledger.update_item(item.id, {"name": "New Name", "price": 1, "quantity": 11})

        assert len(reports.stock_history(item_name="old")) == 1
        assert reports.stock_history(item_name="new") == []

    def test_date_range_is_inclusive_and_date_only_end_covers_day(self, make_item, ledger, reports, db_session):
        item = make_item(quantity=10)
        early = ledger.adjust_stock(item.id, 1)["history_id"]
        late = ledger.adjust_stock(item.id, 1)["history_id"]
        _backdate(db_session, early, datetime(2024, 3, 1, 9, 0))
        _backdate(db_session, late, datetime(2024, 3, 5, 23, 30))

        ids = [r.id for r in reports.stock_history(date_from="2024-03-01", date_to="2024-03-05")]
        assert ids == [late, early]

        ids = [r.id for r in reports.stock_history(date_from="2024-03-02T00:00:00Z")]
        assert late in ids and early not in ids

        ids = [r.id for r in reports.stock_history(date_to="2024-03-05T12:00:00")]
        assert ids == [early]

    def test_bad_filters_rejected(self, reports):
        with pytest.raises(ValidationError):
            reports.stock_history(date_from="yesterday")
        with pytest.raises(ValidationError):
            reports.stock_history(movement="sideways")

    def test_item_history(self, make_item, ledger, reports):
        a = make_item(quantity=10)
        b = make_item(quantity=10)
        ledger.adjust_stock(a.id, 1)
        ledger.adjust_stock(b.id, 1)
        assert [r.item_id for r in reports.item_history(a.id)] == [a.id]


class TestDashboard:
    def test_summary(self, make_item, processor, reports, db_session):
        cola = make_item(name="Cola", price=2.0, quantity=10, min_stock=0)
        make_item(name="Bread", price=3.0, quantity=50, min_stock=0)

        processor.create_order({
            "total_amount": 4.0,
            "items": [{"item_id": cola.id, "quantity": 2, "unit_price": 2.0, "total_price": 4.0}],
        })
        old = processor.create_order({"total_amount": 99.0})
        old.created_at = utcnow() - timedelta(days=2)
        db_session.commit()

        summary = reports.dashboard_summary(10)
        assert summary["total_items"] == 2
        assert summary["total_stock_value"] == round(2.0 * 8 + 3.0 * 50, 2)
        assert summary["low_stock_count"] == 1
        assert summary["today_orders"] == 1
        assert summary["today_sales_total"] == 4.0
        assert len(summary["recent_orders"]) == 2
        assert summary["as_of"].endswith("Z")
