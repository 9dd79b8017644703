"""
Global Flask error handling middleware.

All exceptions (custom or unexpected) are returned as JSON payloads:
{
    "status": "error",
    "error": "ErrorClassName",
    "message": "Human readable message",
    "details": { ... optional context ... }
}
"""

import os
import traceback

from flask import jsonify
from pymongo.errors import ConnectionFailure
from werkzeug.exceptions import HTTPException

from middleware.errors import BaseAppError, DatabaseConnectionError


def register_error_handlers(app):
    """Attach all JSON error handlers to a Flask app instance."""

    @app.errorhandler(BaseAppError)
    def handle_custom_error(err):
        """Handle custom, domain-specific errors."""
        response = jsonify(err.to_dict())
        response.status_code = err.code
        return response

    @app.errorhandler(ConnectionFailure)
    def handle_database_down(err):
        app.logger.error("Database unavailable: %s", err)
        return handle_custom_error(DatabaseConnectionError(details={"reason": str(err)}))

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        """Plain werkzeug errors (404 on unknown routes, 405, ...)."""
        payload = {
            "status": "error",
            "error": err.__class__.__name__,
            "message": err.description,
            "details": {},
        }
        return jsonify(payload), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        """Catch-all handler for unexpected exceptions."""
        app.logger.exception("Unhandled error")
        details = {}
        if app.debug or os.getenv("FLASK_DEBUG") == "1":
            details["traceback"] = traceback.format_exc()

        payload = {
            "status": "error",
            "error": err.__class__.__name__,
            "message": str(err) or "Unexpected internal error",
            "details": details
        }
        return jsonify(payload), 500
