"""Standardized API responses and error handlers.

Every endpoint answers with the same envelope:
    {"success": true, "message": "...", "<resource>": {...}}
    {"success": false, "message": "...", "error": "..."}
"""

import logging

from flask import jsonify
from pydantic import ValidationError as RequestValidationError
from werkzeug.exceptions import HTTPException

from config.settings import settings
from src.services.errors import DomainError

logger = logging.getLogger(__name__)


def success_response(message=None, status_code=200, **payload):
    """
    Standard success response format for all API endpoints.

    Args:
        message: Optional success message
        status_code: HTTP status code (default 200)
        **payload: Resource data, e.g. ``team=team.to_dict()``

    Returns:
        Flask jsonify response with consistent format
    """
    response = {"success": True}

    if message is not None:
        response["message"] = message

    response.update(payload)
    return jsonify(response), status_code


def error_response(message, status_code=500, error=None, details=None):
    """
    Standard error response format for all API endpoints.

    Args:
        message: Human readable error message
        status_code: HTTP status code (default 500)
        error: Underlying error text, only sent outside production
        details: Optional additional error details

    Returns:
        Flask jsonify response with consistent format
    """
    response = {"success": False, "message": str(message)}

    if error is not None:
        response["error"] = str(error)

    if details is not None:
        response["details"] = details

    return jsonify(response), status_code


def format_validation_errors(exc):
    """Flatten a pydantic ValidationError into [{field, message}]."""
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        message = err.get("msg", "Invalid value")
        # pydantic prefixes errors raised in validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def internal_error_response(action, exc):
    """Log an unexpected failure and answer 500.

    The exception text is only echoed to the client outside production.
    """
    logger.error(f"{action} failed: {exc}", exc_info=True)
    error = "Internal server error" if settings.web.is_production else str(exc)
    return error_response(f"Failed to {action}", 500, error=error)


def register_error_handlers(app):
    """Translate domain and validation exceptions into JSON envelopes."""

    @app.errorhandler(DomainError)
    def handle_domain_error(exc):
        return error_response(exc.message, exc.status_code, details=exc.details)

    @app.errorhandler(RequestValidationError)
    def handle_request_validation_error(exc):
        response = {
            "success": False,
            "message": "Validation failed",
            "errors": format_validation_errors(exc),
        }
        return jsonify(response), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return error_response(exc.description or exc.name, exc.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        return internal_error_response("process request", exc)
