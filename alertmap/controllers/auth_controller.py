import logging

from flask import jsonify, request
from flask_jwt_extended import get_current_user, unset_jwt_cookies

from alertmap.auth import authenticate, start_session
from alertmap.errors import AuthenticationError, InternalError
from alertmap.schemas import LoginRequest, RegisterRequest, validate
from alertmap.storage import storage

logger = logging.getLogger(__name__)


class AuthController:
    @staticmethod
    def register():
        data = validate(RegisterRequest, request.get_json(silent=True))
        user = storage.create_user(data.username, data.password)

        response = jsonify({"message": "Registration successful", "user": user.to_dict()})
        return start_session(response, user), 200

    @staticmethod
    def login():
        data = validate(LoginRequest, request.get_json(silent=True))
        user = authenticate(data.username, data.password)

        logger.info("User %s logged in", user.username)
        response = jsonify({"message": "Login successful", "user": user.to_dict()})
        return start_session(response, user), 200

    @staticmethod
    def logout():
        response = jsonify({"message": "Logout successful"})
        try:
            unset_jwt_cookies(response)
        except Exception:
            logger.exception("Logout failed")
            raise InternalError("Logout failed")
        return response, 200

    @staticmethod
    def get_profile():
        user = get_current_user()
        if user is None:
            raise AuthenticationError("Not authenticated")
        return jsonify(user.to_dict()), 200
