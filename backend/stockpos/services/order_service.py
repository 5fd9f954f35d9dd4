"""
Order Service - atomic sale processing

A sale is one unit of work: the order header, its lines, every stock
decrement and every 'out' history row commit together or not at all. A
half-applied sale (order recorded but stock untouched, or stock moved with no
audit row) must never be visible.
"""

from __future__ import annotations

import threading
import time

from ..models import Item, Order, OrderLine
from ..store import PersistentStore
from ..validation import STOCK_OUT, NotFoundError, OrderInput
from .inventory_service import _apply_stock_change

DEFAULT_ORDER_PREFIX = "ORD-"


class OrderNumberGenerator:
    """
    Human-facing order numbers: prefix + microsecond timestamp.

    Numbers are strictly increasing within one generator, so two orders
    created in the same microsecond still get distinct numbers.
    """

    def __init__(self, prefix: str = DEFAULT_ORDER_PREFIX):
        self.prefix = prefix
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            stamp = time.time_ns() // 1_000
            if stamp <= self._last:
                stamp = self._last + 1
            self._last = stamp
        return f"{self.prefix}{stamp}"


def order_reference(order_number: str) -> str:
    return f"Order #{order_number}"


class OrderProcessor:
    def __init__(self, store: PersistentStore, order_numbers: OrderNumberGenerator | None = None):
        self.store = store
        self.order_numbers = order_numbers or OrderNumberGenerator()

    def create_order(self, payload) -> Order:
        """
        Validate and commit a sale.

        Lines are processed in the order supplied; the first line that
        references a missing item or lacks stock aborts the whole order.
        An order with no lines is valid and commits just the header.

        Raises:
            ValidationError: malformed payload (nothing written)
            NotFoundError: a line references an unknown item
            InsufficientStockError: a line would take stock below zero
        """
        data = OrderInput.from_payload(payload)

        with self.store.transaction() as tx:
            order = Order(
                order_number=self.order_numbers.next(),
                customer_name=data.customer_name,
                customer_phone=data.customer_phone,
                total_amount=data.total_amount,
                tax_amount=data.tax_amount,
                discount_amount=data.discount_amount,
                payment_method=data.payment_method,
            )
            tx.add(order)
            tx.flush()

            reference = order_reference(order.order_number)

            for position, line_data in enumerate(data.lines):
                item = tx.locked(Item, id=line_data.item_id)
                if item is None:
                    raise NotFoundError(f"Item with ID {line_data.item_id} not found")

                tx.add(OrderLine(
                    order_id=order.id,
                    item_id=line_data.item_id,
                    position=position,
                    quantity=line_data.quantity,
                    unit_price=line_data.unit_price,
                    total_price=line_data.total_price,
                ))

                _apply_stock_change(tx, item, -line_data.quantity, STOCK_OUT, reference)

        return order

    def list_orders(self) -> list[dict]:
        """
        All orders, newest first, one row per order with an aggregated
        item-name summary and line count.
        """
        orders = (
            self.store.query(Order)
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .all()
        )
        if not orders:
            return []

        rows = (
            self.store.query(OrderLine.order_id, Item.name)
            .outerjoin(Item, Item.id == OrderLine.item_id)
            .filter(OrderLine.order_id.in_([o.id for o in orders]))
            .order_by(OrderLine.order_id, OrderLine.position)
            .all()
        )

        names: dict[str, list[str]] = {}
        counts: dict[str, int] = {}
        for order_id, item_name in rows:
            counts[order_id] = counts.get(order_id, 0) + 1
            if item_name is not None:
                names.setdefault(order_id, []).append(item_name)

        summaries = []
        for order in orders:
            summary = order.to_dict()
            item_names = names.get(order.id)
            summary["item_names"] = ",".join(item_names) if item_names else None
            summary["item_count"] = counts.get(order.id, 0)
            summaries.append(summary)
        return summaries

    def get_order(self, order_id: str) -> dict | None:
        order = self.store.query(Order).filter_by(id=order_id).first()
        if order is None:
            return None

        rows = (
            self.store.query(OrderLine, Item.name, Item.barcode)
            .join(Item, Item.id == OrderLine.item_id)
            .filter(OrderLine.order_id == order_id)
            .order_by(OrderLine.position)
            .all()
        )

        result = order.to_dict()
        result["items"] = []
        for line, name, barcode in rows:
            entry = line.to_dict()
            entry["name"] = name
            entry["barcode"] = barcode
            result["items"].append(entry)
        return result
