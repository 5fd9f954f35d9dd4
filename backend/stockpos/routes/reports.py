# Overview: Flask API routes for the dashboard summary.

from flask import Blueprint, jsonify

from ..decorators import require_login
from ..services.pos_service import get_pos_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_login
def dashboard_route():
    """Item count, stock value, low-stock count, today's sales and the latest orders."""
    return jsonify(get_pos_service().dashboard_summary())
