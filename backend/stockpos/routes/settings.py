from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..decorators import require_login
from ..services.pos_service import get_pos_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_login
def get_all_settings_route():
    settings = get_pos_service().get_all_settings()
    return jsonify({"settings": settings, "count": len(settings)})


@settings_bp.put("")
@require_login
def update_settings_route():
    """Save several keys at once, as the settings form does."""
    payload = request.get_json(silent=True) or {}
    saved = get_pos_service().set_settings(payload.get("settings", payload))
    return jsonify({"settings": saved})


@settings_bp.post("/defaults")
@require_login
def initialize_defaults_route():
    added = get_pos_service().initialize_default_settings()
    return jsonify({"added": added, "count": len(added)})


@settings_bp.get("/<key>")
@require_login
def get_setting_route(key: str):
    value = get_pos_service().get_setting(key)
    if value is None:
        return jsonify({"error": "Setting not found"}), 404
    return jsonify({"key": key, "value": value})


@settings_bp.put("/<key>")
@require_login
def set_setting_route(key: str):
    payload = request.get_json(silent=True) or {}
    setting = get_pos_service().set_setting(key, payload.get("value"))
    return jsonify({"setting": setting})
