from __future__ import annotations

from uuid import uuid4

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def new_id() -> str:
    return str(uuid4())


class Item(db.Model):
    """
    Stocked product.

    quantity is the live on-hand figure. Ledger writes keep it in step with
    stock_history; it must never go below zero.

    barcode is optional but unique when present, so blanks are stored as NULL.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.UniqueConstraint("barcode", name="uq_items_barcode"),
        db.CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
        db.Index("ix_items_barcode", "barcode"),
        db.Index("ix_items_name", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    barcode = db.Column(db.String(64), nullable=True)
    category = db.Column(db.String(120), nullable=True)

    price = db.Column(db.Float, nullable=False)
    cost = db.Column(db.Float, nullable=True, default=0.0)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=True, default=10)

    supplier = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "barcode": self.barcode,
            "category": self.category,
            "price": self.price,
            "cost": self.cost,
            "quantity": self.quantity,
            "min_stock": self.min_stock,
            "supplier": self.supplier,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockHistoryRecord(db.Model):
    """
    Append-only audit row for one stock quantity change.

    item_name and barcode are snapshots taken at the time of the change and
    are never re-joined to the live item. Rows are never updated or deleted.
    """
    __tablename__ = "stock_history"
    __table_args__ = (
        db.CheckConstraint("type IN ('in', 'out')", name="ck_stock_history_type"),
        db.Index("ix_stock_history_item_id", "item_id"),
        db.Index("ix_stock_history_created_at", "created_at"),
        db.Index("ix_stock_history_type", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    item_id = db.Column(db.String(36), db.ForeignKey("items.id"), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    barcode = db.Column(db.String(64), nullable=True)

    type = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    previous_stock = db.Column(db.Integer, nullable=False)
    new_stock = db.Column(db.Integer, nullable=False)

    reference = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "item_name": self.item_name,
            "barcode": self.barcode,
            "type": self.type,
            "quantity": self.quantity,
            "previous_stock": self.previous_stock,
            "new_stock": self.new_stock,
            "reference": self.reference,
            "created_at": to_utc_z(self.created_at),
        }
