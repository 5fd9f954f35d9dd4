"""
Operation facade for the presentation layer.

Every operation the UI can invoke is a method here. PosService is built
around one PersistentStore handle and hands that same handle to each
component, so all operations in a request share a session and no component
reaches for a global connection. Results are JSON-ready dicts.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import StockHistoryRecord
from ..store import PersistentStore
from ..validation import StockHistoryInput
from .auth_service import AuthGateway
from .inventory_service import DEFAULT_LOW_STOCK_THRESHOLD, MANUAL_RECEIVE_REFERENCE, InventoryLedger
from .order_service import OrderNumberGenerator, OrderProcessor
from .reporting_service import ReportingService
from .settings_service import SettingsGateway

ORDER_NUMBERS_EXTENSION = "stockpos.order_numbers"


def _dict_or_none(obj):
    return obj.to_dict() if obj is not None else None


class PosService:
    def __init__(
        self,
        store: PersistentStore,
        order_numbers: OrderNumberGenerator | None = None,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ):
        self.store = store
        self.low_stock_threshold = low_stock_threshold
        self.ledger = InventoryLedger(store)
        self.orders = OrderProcessor(store, order_numbers)
        self.reports = ReportingService(store, ledger=self.ledger, orders=self.orders)
        self.settings = SettingsGateway(store)
        self.auth = AuthGateway(store)

    # Items

    def get_all_items(self) -> list[dict]:
        return [item.to_dict() for item in self.ledger.list_items()]

    def get_item_by_id(self, item_id: str) -> dict | None:
        return _dict_or_none(self.ledger.get_item(item_id))

    def get_item_by_barcode(self, barcode: str) -> dict | None:
        return _dict_or_none(self.ledger.get_item_by_barcode(barcode))

    def search_items(self, term: str | None) -> list[dict]:
        return [item.to_dict() for item in self.ledger.search_items(term)]

    def add_item(self, payload) -> dict:
        return self.ledger.add_item(payload).to_dict()

    def update_item(self, item_id: str, payload) -> dict | None:
        return _dict_or_none(self.ledger.update_item(item_id, payload))

    def delete_item(self, item_id: str) -> dict:
        return {"deleted": self.ledger.delete_item(item_id)}

    def get_low_stock_items(self, threshold: int | None = None) -> list[dict]:
        if threshold is None:
            threshold = self.low_stock_threshold
        return [item.to_dict() for item in self.ledger.low_stock_items(threshold)]

    # Stock

    def update_item_stock(self, item_id: str, new_quantity) -> int:
        return self.ledger.set_stock(item_id, new_quantity)

    def adjust_item_stock(self, item_id: str, delta, movement: str | None = None, reference: str | None = None) -> dict:
        return self.ledger.adjust_stock(item_id, delta, movement, reference)

    def receive_stock(self, entries, reference: str | None = MANUAL_RECEIVE_REFERENCE) -> list[dict]:
        return self.ledger.receive_stock(entries, reference=reference)

    def add_stock_history(self, payload) -> dict:
        """Append a raw audit row (for callers that already changed stock via set_stock)."""
        data = StockHistoryInput.from_payload(payload)
        with self.store.transaction() as tx:
            record = StockHistoryRecord(
                item_id=data.item_id,
                item_name=data.item_name,
                barcode=data.barcode,
                type=data.type,
                quantity=data.quantity,
                previous_stock=data.previous_stock,
                new_stock=data.new_stock,
                reference=data.reference,
            )
            tx.add(record)
            tx.flush()
        return record.to_dict()

    def get_stock_history(self, filters: dict | None = None) -> list[dict]:
        filters = filters or {}
        records = self.reports.stock_history(
            item_name=filters.get("item_name"),
            movement=filters.get("type"),
            date_from=filters.get("date_from"),
            date_to=filters.get("date_to"),
        )
        return [record.to_dict() for record in records]

    # Orders

    def create_order(self, payload) -> dict:
        order = self.orders.create_order(payload)
        return self.orders.get_order(order.id)

    def get_all_orders(self) -> list[dict]:
        return self.orders.list_orders()

    def get_order_by_id(self, order_id: str) -> dict | None:
        return self.orders.get_order(order_id)

    def dashboard_summary(self) -> dict:
        return self.reports.dashboard_summary(self.low_stock_threshold)

    # Settings

    def get_setting(self, key: str) -> str | None:
        return self.settings.get(key)

    def set_setting(self, key: str, value) -> dict:
        return self.settings.set(key, value).to_dict()

    def set_settings(self, values: dict) -> dict:
        return self.settings.set_many(values)

    def get_all_settings(self) -> dict:
        return self.settings.get_all()

    def initialize_default_settings(self) -> list[str]:
        return self.settings.initialize_defaults()

    # Auth

    def authenticate_user(self, email: str, password: str) -> dict | None:
        return self.auth.verify(email, password)

    def update_user_password(self, email: str, current_password: str, new_password: str) -> bool:
        return self.auth.update_password(email, current_password, new_password)

    def initialize_default_user(self) -> bool:
        config = current_app.config
        return self.auth.initialize_default_user(
            config["DEFAULT_ADMIN_USERNAME"],
            config["DEFAULT_ADMIN_EMAIL"],
            config["DEFAULT_ADMIN_PASSWORD"],
        )


def get_pos_service() -> PosService:
    """PosService bound to the current request's session."""
    return PosService(
        PersistentStore(db.session),
        order_numbers=current_app.extensions[ORDER_NUMBERS_EXTENSION],
        low_stock_threshold=current_app.config["LOW_STOCK_THRESHOLD"],
    )
