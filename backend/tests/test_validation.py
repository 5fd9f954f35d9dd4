"""
Input coercion tests.

Each entity has one factory; these pin down how missing, blank and malformed
fields are treated.
"""

import pytest

from stockpos import validation
from stockpos.validation import (
    InsufficientStockError,
    ItemInput,
    OrderInput,
    StockHistoryInput,
    ValidationError,
    require_quantity,
    validate_stock_type,
)


class TestItemInput:
    def test_defaults_for_missing_optional_fields(self):
        data = ItemInput.from_payload({"name": "Widget", "price": "12.5"})
        assert data.price == 12.5
        assert data.cost == 0.0
        assert data.quantity == 1
        assert data.min_stock == 0
        assert data.barcode is None

    def test_zero_quantity_is_kept(self):
        assert ItemInput.from_payload({"name": "W", "price": 1, "quantity": 0}).quantity == 0

    def test_unparsable_optional_numbers_fall_back(self):
        data = ItemInput.from_payload({"name": "W", "price": 1, "cost": "abc", "quantity": "x", "min_stock": "?"})
        assert data.cost == 0.0
        assert data.quantity == 1
        assert data.min_stock == 0

    def test_blank_barcode_becomes_none(self):
        assert ItemInput.from_payload({"name": "W", "price": 1, "barcode": "   "}).barcode is None

    def test_name_is_trimmed(self):
        assert ItemInput.from_payload({"name": "  Widget ", "price": 1}).name == "Widget"

    @pytest.mark.parametrize("payload", [
        {"price": 1},
        {"name": "   ", "price": 1},
    ])
    def test_name_required(self, payload):
        with pytest.raises(ValidationError, match="Item name is required"):
            ItemInput.from_payload(payload)

    @pytest.mark.parametrize("price", [None, "", "abc", "nan", "inf"])
    def test_price_required_and_finite(self, price):
        with pytest.raises(ValidationError, match="Valid item price is required"):
            ItemInput.from_payload({"name": "W", "price": price})

    @pytest.mark.parametrize("field,value", [
        ("price", -1),
        ("cost", -0.5),
        ("quantity", -3),
        ("min_stock", -1),
    ])
    def test_negatives_rejected(self, field, value):
        payload = {"name": "W", "price": 1, field: value}
        with pytest.raises(ValidationError):
            ItemInput.from_payload(payload)

    def test_fractional_quantity_rejected(self):
        with pytest.raises(ValidationError, match="whole number"):
            ItemInput.from_payload({"name": "W", "price": 1, "quantity": 2.5})

    def test_non_object_payload_rejected(self):
        with pytest.raises(ValidationError):
            ItemInput.from_payload(["not", "a", "dict"])


class TestOrderInput:
    def test_missing_items_is_empty_order(self):
        data = OrderInput.from_payload({"total_amount": 0})
        assert data.lines == ()
        assert data.payment_method == "cash"

    def test_items_must_be_list(self):
        with pytest.raises(ValidationError, match="items must be a list"):
            OrderInput.from_payload({"total_amount": 1, "items": {"item_id": "x"}})

    def test_total_amount_required(self):
        with pytest.raises(ValidationError):
            OrderInput.from_payload({"items": []})

    def test_line_fields_checked_with_position(self):
        payload = {
            "total_amount": 5,
            "items": [
                {"item_id": "a", "quantity": 1, "unit_price": 5, "total_price": 5},
                {"item_id": "b", "quantity": 0, "unit_price": 5, "total_price": 0},
            ],
        }
        with pytest.raises(ValidationError, match=r"items\[1\]\.quantity"):
            OrderInput.from_payload(payload)

    def test_line_total_taken_as_supplied(self):
        data = OrderInput.from_payload({
            "total_amount": 9,
            "items": [{"item_id": "a", "quantity": 2, "unit_price": 5, "total_price": 9}],
        })
        assert data.lines[0].total_price == 9


class TestStockHistoryInput:
    def _payload(self, **overrides):
        payload = {
            "item_id": "abc",
            "item_name": "Widget",
            "type": "in",
            "quantity": 5,
            "previous_stock": 10,
            "new_stock": 15,
        }
        payload.update(overrides)
        return payload

    def test_consistent_in_row(self):
        data = StockHistoryInput.from_payload(self._payload())
        assert data.type == "in"
        assert data.new_stock == 15

    def test_consistent_out_row(self):
        data = StockHistoryInput.from_payload(self._payload(type="OUT", new_stock=5))
        assert data.type == "out"

    def test_inconsistent_snapshot_rejected(self):
        with pytest.raises(ValidationError, match="new_stock must equal"):
            StockHistoryInput.from_payload(self._payload(new_stock=14))

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError, match="type must be 'in' or 'out'"):
            StockHistoryInput.from_payload(self._payload(type="transfer"))

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            StockHistoryInput.from_payload(self._payload(quantity=0, new_stock=10))


def test_require_quantity_rejects_negative_and_fraction():
    assert require_quantity("7") == 7
    with pytest.raises(ValidationError):
        require_quantity(-1)
    with pytest.raises(ValidationError):
        require_quantity(1.5)
    with pytest.raises(ValidationError):
        require_quantity(None)


def test_validate_stock_type_normalizes_case():
    assert validate_stock_type(" In ") == "in"


def test_insufficient_stock_error_carries_details():
    error = InsufficientStockError("Insufficient stock for item: Cola", details={"available": 1, "required": 2})
    assert str(error) == "Insufficient stock for item: Cola"
    assert error.details == {"available": 1, "required": 2}
    assert InsufficientStockError("no details").details == {}


def test_domain_errors_live_in_one_module():
    for name in ("ValidationError", "ConflictError", "NotFoundError", "InsufficientStockError"):
        assert getattr(validation, name).__module__ == "stockpos.validation"
