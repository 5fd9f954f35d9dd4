# Overview: Request decorators for API routes.

from functools import wraps

from flask import g, jsonify, session

from .extensions import db
from .models import User


def require_login(f):
    """
    Require a logged-in local user.

    The login route stores the user id in the signed session cookie. Sets
    g.current_user for the route. Returns 401 if there is no session, or the
    user no longer exists or has been deactivated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user_id = session.get("user_id")
        if user_id is None:
            return jsonify({"error": "Authentication required"}), 401

        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            session.pop("user_id", None)
            return jsonify({"error": "Invalid or expired session"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
