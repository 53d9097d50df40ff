import logging

from flask import current_app, request
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from api.responses import error_response
from models.schemas.common import flatten_messages
from services.errors import ServiceError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    # Domain errors carry their own status and client-facing message
    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        if err.status_code >= 500:
            logger.exception("Service failure", exc_info=err)
        return error_response(err.message, err.status_code)

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        if current_app and current_app.debug:
            logger.debug("Validation failed: %s", err.messages)
        message = "Validation error: " + ", ".join(flatten_messages(err.messages))
        return error_response(message, 400, details=err.messages if isinstance(err.messages, dict) else None)

    # Integrity errors that escaped a service (unique constraints, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err)).lower()
        logger.warning("Integrity error: %s", message)
        if "unique" in message:
            return error_response("Duplicate value", 409)
        return error_response("Integrity error", 400)

    # 404 for unknown routes
    @app.errorhandler(404)
    def not_found(e):
        return error_response(f"Route not found: {request.path}", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("Internal server error", 500, details=details)
