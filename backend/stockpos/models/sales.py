from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .inventory import new_id


class Order(db.Model):
    """
    Completed sale.

    Header and lines are written in the same transaction as the stock
    decrements they cause. Only status may change after creation.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_number", name="uq_orders_order_number"),
        db.Index("ix_orders_created_at", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    # Human-facing number (e.g. "ORD-1718023456789123")
    order_number = db.Column(db.String(64), nullable=False)

    customer_name = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(64), nullable=True)

    total_amount = db.Column(db.Float, nullable=False)
    tax_amount = db.Column(db.Float, nullable=False, default=0.0)
    discount_amount = db.Column(db.Float, nullable=False, default=0.0)

    payment_method = db.Column(db.String(32), nullable=False, default="cash")
    status = db.Column(db.String(16), nullable=False, default="completed")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    lines = db.relationship(
        "OrderLine",
        backref=db.backref("order", lazy=True),
        lazy=True,
        order_by="OrderLine.position",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "total_amount": self.total_amount,
            "tax_amount": self.tax_amount,
            "discount_amount": self.discount_amount,
            "payment_method": self.payment_method,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class OrderLine(db.Model):
    """Individual line items on an order."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.Index("ix_order_items_order_id", "order_id"),
        db.Index("ix_order_items_item_id", "item_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False)
    item_id = db.Column(db.String(36), db.ForeignKey("items.id"), nullable=False)

    # Line order as supplied by the caller
    position = db.Column(db.Integer, nullable=False, default=0)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    total_price = db.Column(db.Float, nullable=False)

    item = db.relationship("Item")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
        }
