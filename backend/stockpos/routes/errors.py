"""
JSON error handling for every blueprint.

Services raise domain errors and never build responses. This module turns
them into {"error": ...} bodies with the matching status code, so routes can
let them propagate instead of wrapping every call in try/except.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..store import StoreError
from ..validation import ConflictError, InsufficientStockError, NotFoundError, ValidationError

errors_bp = Blueprint("errors", __name__)


def _error(message: str, status: int, **extra):
    body = {"error": message}
    body.update(extra)
    return jsonify(body), status


@errors_bp.app_errorhandler(ValidationError)
def handle_validation_error(error: ValidationError):
    return _error(str(error), 400)


@errors_bp.app_errorhandler(InsufficientStockError)
def handle_insufficient_stock(error: InsufficientStockError):
    return _error(str(error), 409, details=error.details)


@errors_bp.app_errorhandler(ConflictError)
def handle_conflict(error: ConflictError):
    return _error(str(error), 409)


@errors_bp.app_errorhandler(NotFoundError)
def handle_not_found(error: NotFoundError):
    return _error(str(error), 404)


@errors_bp.app_errorhandler(StoreError)
def handle_store_error(error: StoreError):
    current_app.logger.exception("Storage failure on %s %s", request.method, request.path, exc_info=error)
    return _error("Database error", 500)


@errors_bp.app_errorhandler(Exception)
def handle_exception(error: Exception):
    # Non-500 HTTP errors (404 routing, 405, bad JSON) keep their own status
    if isinstance(error, HTTPException) and error.code != 500:
        return _error(error.description or error.name, error.code)

    current_app.logger.exception("Unhandled exception", exc_info=error)
    return _error("Internal server error", 500)
