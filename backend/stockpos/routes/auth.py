# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockpos/routes/auth.py
"""
Local authentication routes

- Login checks email/password and stores the user id in the signed session
  cookie; every other /api route is gated on it by require_login
- Failed login is always a plain 401 with no hint about which field was wrong
- A successful login against a legacy password hash upgrades it in place
"""

from flask import Blueprint, current_app, g, jsonify, request, session

from ..decorators import require_login
from ..services.pos_service import get_pos_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    user = get_pos_service().authenticate_user(email, password)
    if user is None:
        current_app.logger.info("Failed login attempt for %s", email)
        return jsonify({"error": "Invalid credentials"}), 401

    session.clear()
    session["user_id"] = user["id"]
    return jsonify({"user": user, "message": "Login successful"}), 200


@auth_bp.post("/logout")
@require_login
def logout_route():
    session.clear()
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_login
def me_route():
    return jsonify({"user": g.current_user.to_dict()})


@auth_bp.post("/password")
@require_login
def change_password_route():
    """
    Rotate the logged-in user's password.

    Body: {"current_password": str, "new_password": str}
    401 when the current password does not verify.
    """
    data = request.get_json(silent=True) or {}
    current_password = data.get("current_password")
    new_password = data.get("new_password")

    if not all([current_password, new_password]):
        return jsonify({"error": "current_password and new_password required"}), 400

    updated = get_pos_service().update_user_password(
        g.current_user.email, current_password, new_password
    )
    if not updated:
        return jsonify({"error": "Current password is incorrect"}), 401
    return jsonify({"message": "Password updated"}), 200


@auth_bp.post("/default-user")
def default_user_route():
    """Create the configured administrator on first run; no-op afterwards."""
    created = get_pos_service().initialize_default_user()
    return jsonify({"created": created}), 201 if created else 200
