import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from alertmap.extensions import db, jwt

logger = logging.getLogger(__name__)


class AlertMapError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code = 500
    kind = "internal"

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self):
        body = {"message": self.message, "error": self.kind}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AlertMapError):
    status_code = 400
    kind = "validation"


class AuthenticationError(AlertMapError):
    status_code = 401
    kind = "authentication"


class InvalidCredentialsError(AuthenticationError):
    # Login failures answer 400 like the other form errors
    status_code = 400


class AuthorizationError(AlertMapError):
    status_code = 403
    kind = "authorization"


class NotFoundError(AlertMapError):
    status_code = 404
    kind = "not_found"


class ConflictError(AlertMapError):
    # Duplicate usernames are reported as 400 on the register endpoint
    status_code = 400
    kind = "conflict"


class InternalError(AlertMapError):
    status_code = 500
    kind = "internal"


def error_response(error):
    return jsonify(error.to_dict()), error.status_code


def _not_authenticated(message="Not authenticated"):
    return error_response(AuthenticationError(message))


# --- JWT callbacks ---
@jwt.unauthorized_loader
def missing_token(reason):
    return _not_authenticated()


@jwt.invalid_token_loader
def invalid_token(reason):
    return _not_authenticated("Invalid session")


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    return _not_authenticated("Session expired")


@jwt.revoked_token_loader
def revoked_token(jwt_header, jwt_payload):
    return _not_authenticated("Session revoked")


@jwt.user_lookup_error_loader
def unknown_user(jwt_header, jwt_payload):
    return _not_authenticated()


def register_error_handlers(app):
    @app.errorhandler(AlertMapError)
    def handle_alertmap_error(error):
        if isinstance(error, InternalError):
            db.session.rollback()
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description, "error": error.name.lower().replace(" ", "_")}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        db.session.rollback()
        logger.exception("Storage failure")
        return error_response(InternalError("Internal server error"))

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error")
        return error_response(InternalError("Internal server error"))
