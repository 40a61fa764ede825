from flask import Blueprint, current_app, jsonify
from flask_wtf.csrf import CSRFError
from google.api_core import exceptions as google_exceptions
from werkzeug.exceptions import HTTPException

from .errors import (
    AppError,
    DuplicateResourceError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

error_handlers_bp = Blueprint("error_handlers", __name__)


def _error_response(reason, message, status_code):
    return jsonify({"error": reason, "message": message}), status_code


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors."""
    current_app.logger.warning(
        f"Validation Error: {error.field} {error.detail}: {error.message}"
    )
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(DuplicateResourceError)
def handle_duplicate_resource_error(error):
    """Handles duplicate resource errors."""
    current_app.logger.warning(f"Duplicate Resource Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    if error.status_code >= 500:
        current_app.logger.error(f"Application Error: {error.message}")
    else:
        current_app.logger.warning(f"Application Error: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(google_exceptions.GoogleAPICallError)
def handle_store_error(e):
    """Handles Firestore errors that escaped the store adapter."""
    current_app.logger.error(f"Database Error: {e}")
    # Avoid exposing raw database error details to the client
    error = StoreUnavailableError()
    return jsonify(error.to_dict()), error.status_code


@error_handlers_bp.app_errorhandler(CSRFError)
def handle_csrf_error(e):
    """Handles CSRF errors, which usually indicate an expired session."""
    current_app.logger.warning(f"CSRF Error: {e.description}")
    return _error_response("csrf_failed", "Missing or invalid CSRF token.", 400)


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return _error_response("not_found", "Resource not found.", 404)


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests with a method the route does not accept."""
    return _error_response("method_not_allowed", "Method not allowed.", 405)


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return _error_response("server_error", "Internal server error.", 500)


@error_handlers_bp.app_errorhandler(Exception)
def handle_unexpected_error(e):
    """Handles exceptions no other handler claimed."""
    if isinstance(e, HTTPException):
        return _error_response("http_error", e.description, e.code)
    current_app.logger.exception(f"Unhandled exception: {e}")
    return _error_response("server_error", "Internal server error.", 500)
