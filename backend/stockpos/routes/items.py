# Overview: Flask API routes for item records and stock quantities.

# backend/stockpos/routes/items.py
"""
Item catalogue and stock routes.

All routes require a logged-in session. Domain errors raised by the services
(ValidationError, ConflictError, NotFoundError, InsufficientStockError) are
turned into JSON responses by routes.errors.
"""
from flask import Blueprint, jsonify, request

from ..decorators import require_login
from ..services.pos_service import get_pos_service


items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@require_login
def list_items_route():
    """List items by name; ?q= filters across name, description, barcode and category."""
    service = get_pos_service()
    term = request.args.get("q")
    items = service.search_items(term) if term else service.get_all_items()
    return jsonify({"items": items, "count": len(items)})


@items_bp.post("")
@require_login
def create_item_route():
    payload = request.get_json(silent=True)
    item = get_pos_service().add_item(payload)
    return jsonify({"item": item}), 201


@items_bp.get("/low-stock")
@require_login
def low_stock_route():
    threshold = request.args.get("threshold", type=int)
    items = get_pos_service().get_low_stock_items(threshold)
    return jsonify({"items": items, "count": len(items)})


@items_bp.get("/barcode/<barcode>")
@require_login
def get_item_by_barcode_route(barcode: str):
    item = get_pos_service().get_item_by_barcode(barcode)
    if item is None:
        return jsonify({"error": "Item not found"}), 404
    return jsonify({"item": item})


@items_bp.get("/<item_id>")
@require_login
def get_item_route(item_id: str):
    item = get_pos_service().get_item_by_id(item_id)
    if item is None:
        return jsonify({"error": "Item not found"}), 404
    return jsonify({"item": item})


@items_bp.put("/<item_id>")
@require_login
def update_item_route(item_id: str):
    item = get_pos_service().update_item(item_id, request.get_json(silent=True))
    if item is None:
        return jsonify({"error": "Item not found"}), 404
    return jsonify({"item": item})


@items_bp.delete("/<item_id>")
@require_login
def delete_item_route(item_id: str):
    result = get_pos_service().delete_item(item_id)
    if not result["deleted"]:
        return jsonify({"error": "Item not found"}), 404
    return jsonify(result)


@items_bp.put("/<item_id>/stock")
@require_login
def set_item_stock_route(item_id: str):
    """
    Overwrite the on-hand quantity without writing history.

    Body: {"quantity": int}. Prefer POST /adjust, which records the change.
    """
    payload = request.get_json(silent=True) or {}
    changed = get_pos_service().update_item_stock(item_id, payload.get("quantity"))
    if not changed:
        return jsonify({"error": "Item not found"}), 404
    return jsonify({"changes": changed})


@items_bp.post("/<item_id>/adjust")
@require_login
def adjust_item_stock_route(item_id: str):
    """
    Apply a signed quantity change with its stock history row.

    Body: {"quantity_change": int, "type": "in"|"out" (optional), "reference": str (optional)}
    """
    payload = request.get_json(silent=True) or {}
    result = get_pos_service().adjust_item_stock(
        item_id,
        payload.get("quantity_change"),
        movement=payload.get("type"),
        reference=payload.get("reference"),
    )
    return jsonify(result)
