# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/stockpos/services/inventory_service.py

from __future__ import annotations

import logging

from sqlalchemy import func, or_

from ..models import Item, OrderLine, StockHistoryRecord
from ..store import PersistentStore, StoreTransaction
from ..time_utils import utcnow
from ..validation import (
    STOCK_IN,
    STOCK_OUT,
    ConflictError,
    InsufficientStockError,
    ItemInput,
    NotFoundError,
    ValidationError,
    require_quantity,
    validate_stock_type,
)
"""
Inventory Invariants (authoritative)

- Item.quantity is the stored on-hand figure and may never go negative.
- Every ledger quantity change (adjust, receive, sale) appends exactly one
  StockHistoryRecord in the same DB transaction, with
  new_stock - previous_stock = +quantity for 'in' and -quantity for 'out'.
- set_stock is the one unaudited overwrite; callers that need an audit row
  pair it with add_stock_history or use adjust_stock instead.
- Items that appear on any order line cannot be deleted.
"""

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10
MANUAL_RECEIVE_REFERENCE = "Manual Stock Addition"

SAMPLE_ITEMS = (
    {
        "name": "Coca Cola 500ml",
        "description": "Refreshing cola drink",
        "barcode": "1234567890123",
        "category": "Beverages",
        "price": 2.50,
        "cost": 1.50,
        "quantity": 100,
        "min_stock": 20,
        "supplier": "Coca Cola Company",
    },
    {
        "name": "Bread Loaf",
        "description": "Fresh white bread",
        "barcode": "2345678901234",
        "category": "Bakery",
        "price": 3.00,
        "cost": 1.80,
        "quantity": 50,
        "min_stock": 10,
        "supplier": "Local Bakery",
    },
    {
        "name": "Milk 1L",
        "description": "Fresh whole milk",
        "barcode": "3456789012345",
        "category": "Dairy",
        "price": 4.50,
        "cost": 3.00,
        "quantity": 30,
        "min_stock": 15,
        "supplier": "Dairy Farm Co.",
    },
)


def _movement_for(delta: int, movement: str | None) -> str:
    if delta == 0:
        raise ValidationError("quantity change must be non-zero")
    expected = STOCK_IN if delta > 0 else STOCK_OUT
    if movement is None:
        return expected
    movement = validate_stock_type(movement)
    if movement != expected:
        raise ValidationError(f"type '{movement}' does not match a change of {delta:+d}")
    return movement


def _apply_stock_change(
    tx: StoreTransaction,
    item: Item,
    delta: int,
    movement: str,
    reference: str | None,
) -> StockHistoryRecord:
    """Core check/write/audit step without its own transaction.

    Called by adjust_stock(), receive_stock() and the order processor, which
    all own the surrounding transaction.
    """
    previous_stock = item.quantity
    new_stock = previous_stock + delta
    if new_stock < 0:
        raise InsufficientStockError(
            f"Insufficient stock for item: {item.name}. "
            f"Available: {previous_stock}, Required: {abs(delta)}",
            details={
                "item_id": item.id,
                "item_name": item.name,
                "available": previous_stock,
                "required": abs(delta),
            },
        )

    item.quantity = new_stock
    item.updated_at = utcnow()

    record = StockHistoryRecord(
        item_id=item.id,
        item_name=item.name,
        barcode=item.barcode,
        type=movement,
        quantity=abs(delta),
        previous_stock=previous_stock,
        new_stock=new_stock,
        reference=reference,
    )
    tx.add(record)
    tx.flush()
    return record


class InventoryLedger:
    def __init__(self, store: PersistentStore):
        self.store = store

    # -- reads -----------------------------------------------------------

    def get_item(self, item_id: str) -> Item | None:
        return self.store.query(Item).filter_by(id=item_id).first()

    def get_item_by_barcode(self, barcode: str | None) -> Item | None:
        if barcode is None or not barcode.strip():
            return None
        # Exact and case-sensitive
        return self.store.query(Item).filter(Item.barcode == barcode.strip()).first()

    def list_items(self) -> list[Item]:
        return self.store.query(Item).order_by(Item.name.asc(), Item.id.asc()).all()

    def search_items(self, term: str | None) -> list[Item]:
        if term is None or not term.strip():
            return self.list_items()

        needle = term.strip().lower()
        columns = (Item.name, Item.description, Item.barcode, Item.category)
        return (
            self.store.query(Item)
            .filter(or_(*(func.lower(col).contains(needle, autoescape=True) for col in columns)))
            .order_by(Item.name.asc(), Item.id.asc())
            .all()
        )

    def low_stock_items(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[Item]:
        """
        Items at or below their own min_stock OR at or below the global threshold.

        The second clause is a safety net for items whose min_stock is 0 or
        unset; both conditions are inclusive.
        """
        return (
            self.store.query(Item)
            .filter(or_(Item.quantity <= Item.min_stock, Item.quantity <= threshold))
            .order_by(Item.quantity.asc(), Item.name.asc())
            .all()
        )

    # -- item records ----------------------------------------------------

    def seed_sample_items(self) -> int:
        """Insert SAMPLE_ITEMS into an empty catalogue. Returns the number added."""
        if self.store.query(func.count(Item.id)).scalar():
            return 0

        rows = [ItemInput.from_payload(sample) for sample in SAMPLE_ITEMS]
        with self.store.transaction() as tx:
            for data in rows:
                tx.add(Item(**data.columns()))
        logger.info("Inserted %d sample items", len(rows))
        return len(rows)

    def add_item(self, payload) -> Item:
        data = ItemInput.from_payload(payload)

        with self.store.transaction() as tx:
            item = Item(**data.columns())
            if data.id:
                item.id = data.id
            tx.add(item)
            tx.flush()
        return item

    def update_item(self, item_id: str, payload) -> Item | None:
        """Full replace of the mutable fields. Returns None when no row matches."""
        data = ItemInput.from_payload(payload)

        with self.store.transaction() as tx:
            item = tx.locked(Item, id=item_id)
            if item is None:
                return None
            for key, value in data.columns().items():
                setattr(item, key, value)
            item.updated_at = utcnow()
            tx.flush()
        return item

    def delete_item(self, item_id: str) -> bool:
        with self.store.transaction() as tx:
            references = tx.query(func.count(OrderLine.id)).filter(OrderLine.item_id == item_id).scalar()
            if references:
                raise ConflictError(
                    "Cannot delete item: referenced by order history"
                )
            deleted = tx.query(Item).filter(Item.id == item_id).delete(synchronize_session="fetch")
        return deleted > 0

    # -- quantities ------------------------------------------------------

    def set_stock(self, item_id: str, new_quantity) -> int:
        """
        Overwrite quantity without writing history.

        Returns the number of rows changed (0 when the id is unknown).
        """
        quantity = require_quantity(new_quantity)

        with self.store.transaction() as tx:
            item = tx.locked(Item, id=item_id)
            if item is None:
                return 0
            item.quantity = quantity
            item.updated_at = utcnow()
            tx.flush()
        return 1

    def adjust_stock(
        self,
        item_id: str,
        delta,
        movement: str | None = None,
        reference: str | None = None,
    ) -> dict:
        """
        Apply a signed delta atomically with its audit row.

        Read, decision, write and history insert share one transaction, so a
        failure at any step leaves both the item and stock_history untouched.
        """
        change = _parse_delta(delta)
        movement = _movement_for(change, movement)

        with self.store.transaction() as tx:
            item = tx.locked(Item, id=item_id)
            if item is None:
                raise NotFoundError(f"Item with ID {item_id} not found")
            record = _apply_stock_change(tx, item, change, movement, reference)

        return {
            "item_id": item_id,
            "previous_stock": record.previous_stock,
            "new_stock": record.new_stock,
            "quantity_change": change,
            "history_id": record.id,
        }

    def receive_stock(self, entries, reference: str | None = MANUAL_RECEIVE_REFERENCE) -> list[dict]:
        """
        Add stock to several items in one transaction.

        entries: iterable of {"item_id": ..., "quantity": ...} with positive
        quantities. Any failure rolls back every entry.
        """
        if not isinstance(entries, (list, tuple)) or not entries:
            raise ValidationError("entries must be a non-empty list")

        parsed = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ValidationError(f"entries[{i}] must be an object")
            item_id = str(entry.get("item_id") or "").strip()
            if not item_id:
                raise ValidationError(f"entries[{i}].item_id is required")
            quantity = require_quantity(entry.get("quantity"), f"entries[{i}].quantity")
            if quantity == 0:
                raise ValidationError(f"entries[{i}].quantity must be >= 1")
            parsed.append((item_id, quantity))

        results = []
        with self.store.transaction() as tx:
            for item_id, quantity in parsed:
                item = tx.locked(Item, id=item_id)
                if item is None:
                    raise NotFoundError(f"Item with ID {item_id} not found")
                record = _apply_stock_change(tx, item, quantity, STOCK_IN, reference)
                results.append({
                    "item_id": item_id,
                    "previous_stock": record.previous_stock,
                    "new_stock": record.new_stock,
                    "quantity_change": quantity,
                    "history_id": record.id,
                })
        return results


def _parse_delta(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("quantity change must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValidationError("quantity change must be an integer")
