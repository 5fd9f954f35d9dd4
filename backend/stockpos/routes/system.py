# backend/stockpos/routes/system.py
"""
System health endpoint.
"""

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Item, Order, StockHistoryRecord

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a few cheap counts.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        item_count = db.session.query(Item).count()
        order_count = db.session.query(Order).count()
        history_count = db.session.query(StockHistoryRecord).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "items": item_count,
                "orders": order_count,
                "stock_history": history_count,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    status = "ok" if database["status"] == "healthy" else "degraded"
    code = 200 if status == "ok" else 503
    return jsonify({"status": status, "checks": {"database": database}}), code
