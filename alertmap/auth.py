"""Cookie-based session handling on top of Flask-JWT-Extended."""
import logging
from datetime import datetime, timezone

from flask import current_app
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, set_access_cookies
from werkzeug.security import generate_password_hash

from alertmap.errors import InvalidCredentialsError
from alertmap.extensions import jwt
from alertmap.storage import storage

logger = logging.getLogger(__name__)

GENERIC_LOGIN_FAILURE = "Invalid username or password"

# Checked against when the username is unknown so both failures cost a hash
_DUMMY_HASH = generate_password_hash("not-a-real-password")


@jwt.user_identity_loader
def user_identity(user):
    return str(user.id)


@jwt.user_lookup_loader
def load_user(jwt_header, jwt_data):
    try:
        return storage.get_user(int(jwt_data["sub"]))
    except (TypeError, ValueError):
        return None


def authenticate(username, password):
    """Return the matching user or raise one generic error for either failure."""
    user = storage.get_user_by_username(username)
    if user is None:
        storage.verify_password_hash(_DUMMY_HASH, password)
        logger.info("Failed login for unknown username %r", username)
        raise InvalidCredentialsError(GENERIC_LOGIN_FAILURE)
    if not storage.verify_password(user, password):
        logger.info("Failed login for %r", username)
        raise InvalidCredentialsError(GENERIC_LOGIN_FAILURE)
    return user


def start_session(response, user):
    set_access_cookies(response, create_access_token(identity=user))
    return response


def refresh_expiring_session(response):
    """Re-issue the cookie when the current token is close to expiry."""
    try:
        payload = get_jwt()
        expires = datetime.fromtimestamp(payload["exp"], timezone.utc)
    except (RuntimeError, KeyError):
        # No token was verified for this request
        return response

    window = current_app.config["JWT_REFRESH_WINDOW"]
    if expires - datetime.now(timezone.utc) < window:
        user = storage.get_user(int(get_jwt_identity()))
        if user is not None:
            start_session(response, user)
    return response
