"""
Input validation and coercion for every entity the core writes.

Each entity has exactly one factory (ItemInput.from_payload,
OrderInput.from_payload, StockHistoryInput.from_payload). Routes, the CLI and
the services all go through these, so a price of "12.5" or a missing
min_stock is treated the same way no matter where it came from.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


STOCK_IN = "in"
STOCK_OUT = "out"
STOCK_TYPES = (STOCK_IN, STOCK_OUT)

DEFAULT_ITEM_QUANTITY = 1
DEFAULT_MIN_STOCK = 0
DEFAULT_PAYMENT_METHOD = "cash"


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (duplicate barcode, referenced item)."""


class NotFoundError(LookupError):
    """404-level: a referenced entity does not exist."""


class InsufficientStockError(ValueError):
    """409-level: a change would take an item's quantity below zero.

    details carries item_id, item_name, available and required.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    cleaned = _clean_text(value)
    return cleaned or None


def _to_float(value: Any) -> float | None:
    """Parse a number the way a form field would; None when unparsable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _coerce_money(value: Any, field_name: str, *, required: bool, default: float = 0.0) -> float:
    if _is_blank(value):
        if required:
            raise ValidationError(f"Valid {field_name} is required")
        return default

    number = _to_float(value)
    if number is None:
        if required:
            raise ValidationError(f"Valid {field_name} is required")
        return default

    if number < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return number


def _coerce_count(value: Any, field_name: str, *, default: int) -> int:
    """
    Non-negative integer with a default for missing or unparsable input.

    Fractional and negative values are rejected rather than rounded or
    clamped.
    """
    if _is_blank(value):
        return default

    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        parsed = _to_float(value)
        if parsed is None:
            return default
        if not parsed.is_integer():
            raise ValidationError(f"{field_name} must be a whole number")
        number = int(parsed)

    if number < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return number


def _require_int(value: Any, field_name: str, *, minimum: int) -> int:
    if _is_blank(value):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        parsed = _to_float(value)
        if parsed is None or not parsed.is_integer():
            raise ValidationError(f"{field_name} must be an integer")
        number = int(parsed)
    if number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return number


def _require_payload(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def require_quantity(value: Any, field_name: str = "quantity") -> int:
    """Whole number >= 0, no defaulting. Used for stock overwrites."""
    return _require_int(value, field_name, minimum=0)


@dataclass(frozen=True)
class ItemInput:
    name: str
    price: float
    cost: float = 0.0
    quantity: int = DEFAULT_ITEM_QUANTITY
    min_stock: int = DEFAULT_MIN_STOCK
    description: str = ""
    barcode: str | None = None
    category: str = ""
    supplier: str = ""
    id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ItemInput":
        data = _require_payload(payload)

        name = _clean_text(data.get("name"))
        if not name:
            raise ValidationError("Item name is required")

        return cls(
            id=_optional_text(data.get("id")),
            name=name,
            price=_coerce_money(data.get("price"), "item price", required=True),
            cost=_coerce_money(data.get("cost"), "cost", required=False),
            quantity=_coerce_count(data.get("quantity"), "quantity", default=DEFAULT_ITEM_QUANTITY),
            min_stock=_coerce_count(data.get("min_stock"), "min_stock", default=DEFAULT_MIN_STOCK),
            description=_clean_text(data.get("description")),
            barcode=_optional_text(data.get("barcode")),
            category=_clean_text(data.get("category")),
            supplier=_clean_text(data.get("supplier")),
        )

    def columns(self) -> dict:
        """Mutable item columns (everything except id)."""
        return {
            "name": self.name,
            "description": self.description,
            "barcode": self.barcode,
            "category": self.category,
            "price": self.price,
            "cost": self.cost,
            "quantity": self.quantity,
            "min_stock": self.min_stock,
            "supplier": self.supplier,
        }


@dataclass(frozen=True)
class OrderLineInput:
    item_id: str
    quantity: int
    unit_price: float
    total_price: float

    @classmethod
    def from_payload(cls, payload: Any, position: int) -> "OrderLineInput":
        if not isinstance(payload, dict):
            raise ValidationError(f"items[{position}] must be an object")

        item_id = _clean_text(payload.get("item_id"))
        if not item_id:
            raise ValidationError(f"items[{position}].item_id is required")

        return cls(
            item_id=item_id,
            quantity=_require_int(payload.get("quantity"), f"items[{position}].quantity", minimum=1),
            unit_price=_coerce_money(payload.get("unit_price"), f"items[{position}].unit_price", required=True),
            # Taken as supplied; never re-derived from quantity * unit_price
            total_price=_coerce_money(payload.get("total_price"), f"items[{position}].total_price", required=True),
        )


@dataclass(frozen=True)
class OrderInput:
    total_amount: float
    tax_amount: float = 0.0
    discount_amount: float = 0.0
    payment_method: str = DEFAULT_PAYMENT_METHOD
    customer_name: str | None = None
    customer_phone: str | None = None
    lines: tuple[OrderLineInput, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Any) -> "OrderInput":
        data = _require_payload(payload)

        raw_lines = data.get("items")
        if raw_lines is None:
            raw_lines = []
        if not isinstance(raw_lines, list):
            raise ValidationError("items must be a list")

        return cls(
            customer_name=_optional_text(data.get("customer_name")),
            customer_phone=_optional_text(data.get("customer_phone")),
            total_amount=_coerce_money(data.get("total_amount"), "total_amount", required=True),
            tax_amount=_coerce_money(data.get("tax_amount"), "tax_amount", required=False),
            discount_amount=_coerce_money(data.get("discount_amount"), "discount_amount", required=False),
            payment_method=_optional_text(data.get("payment_method")) or DEFAULT_PAYMENT_METHOD,
            lines=tuple(OrderLineInput.from_payload(line, i) for i, line in enumerate(raw_lines)),
        )


@dataclass(frozen=True)
class StockHistoryInput:
    item_id: str
    item_name: str
    type: str
    quantity: int
    previous_stock: int
    new_stock: int
    barcode: str | None = None
    reference: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "StockHistoryInput":
        data = _require_payload(payload)

        item_id = _clean_text(data.get("item_id"))
        if not item_id:
            raise ValidationError("item_id is required")

        item_name = _clean_text(data.get("item_name"))
        if not item_name:
            raise ValidationError("item_name is required")

        movement = validate_stock_type(data.get("type"))
        quantity = _require_int(data.get("quantity"), "quantity", minimum=1)
        previous_stock = _require_int(data.get("previous_stock"), "previous_stock", minimum=0)
        new_stock = _require_int(data.get("new_stock"), "new_stock", minimum=0)

        expected = previous_stock + quantity if movement == STOCK_IN else previous_stock - quantity
        if new_stock != expected:
            raise ValidationError(
                f"new_stock must equal previous_stock {'+' if movement == STOCK_IN else '-'} quantity"
            )

        return cls(
            item_id=item_id,
            item_name=item_name,
            barcode=_optional_text(data.get("barcode")),
            type=movement,
            quantity=quantity,
            previous_stock=previous_stock,
            new_stock=new_stock,
            reference=_optional_text(data.get("reference")),
        )


def validate_stock_type(value: Any) -> str:
    movement = _clean_text(value).lower()
    if movement not in STOCK_TYPES:
        raise ValidationError("type must be 'in' or 'out'")
    return movement
