# Overview: Flask API routes for sales orders.

from flask import Blueprint, jsonify, request

from ..decorators import require_login
from ..services.pos_service import get_pos_service


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@require_login
def create_order_route():
    """
    Record a sale and decrement stock for every line.

    Body:
    {
        "customer_name": str, "customer_phone": str,
        "total_amount": float, "tax_amount": float, "discount_amount": float,
        "payment_method": str,
        "items": [{"item_id": str, "quantity": int, "unit_price": float, "total_price": float}]
    }

    409 with details when a line exceeds available stock; nothing is written.
    """
    order = get_pos_service().create_order(request.get_json(silent=True))
    return jsonify({"order": order}), 201


@orders_bp.get("")
@require_login
def list_orders_route():
    orders = get_pos_service().get_all_orders()
    return jsonify({"orders": orders, "count": len(orders)})


@orders_bp.get("/<order_id>")
@require_login
def get_order_route(order_id: str):
    order = get_pos_service().get_order_by_id(order_id)
    if order is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify({"order": order})
