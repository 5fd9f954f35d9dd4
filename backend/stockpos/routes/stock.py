# Overview: Flask API routes for stock receiving and the stock history ledger.

from flask import Blueprint, jsonify, request

from ..decorators import require_login
from ..services.inventory_service import MANUAL_RECEIVE_REFERENCE
from ..services.pos_service import get_pos_service


stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


@stock_bp.post("/receive")
@require_login
def receive_stock_route():
    """
    Receive stock for several items in one transaction.

    Body: {"entries": [{"item_id": str, "quantity": int}, ...], "reference": str (optional)}
    Any bad entry rolls back the whole batch.
    """
    payload = request.get_json(silent=True) or {}
    results = get_pos_service().receive_stock(
        payload.get("entries"),
        reference=payload.get("reference") or MANUAL_RECEIVE_REFERENCE,
    )
    return jsonify({"received": results, "count": len(results)}), 201


@stock_bp.post("/history")
@require_login
def add_stock_history_route():
    record = get_pos_service().add_stock_history(request.get_json(silent=True))
    return jsonify({"record": record}), 201


@stock_bp.get("/history")
@require_login
def stock_history_route():
    """
    Stock movements, newest first.

    Query params (all optional, combined with AND):
    - item_name: case-insensitive substring of the snapshot name
    - type: in|out
    - date_from / date_to: inclusive ISO-8601 bounds
    """
    filters = {
        key: request.args.get(key)
        for key in ("item_name", "type", "date_from", "date_to")
        if request.args.get(key)
    }
    records = get_pos_service().get_stock_history(filters)
    return jsonify({"history": records, "count": len(records)})
