from flask import Blueprint
from flask_jwt_extended import jwt_required

from alertmap.controllers.auth_controller import AuthController

auth_bp = Blueprint('auth', __name__)

@auth_bp.route('/register', methods=['POST'])
def register():
    return AuthController.register()

@auth_bp.route('/login', methods=['POST'])
def login():
    return AuthController.login()

@auth_bp.route('/logout', methods=['POST'])
def logout():
    return AuthController.logout()

@auth_bp.route('/user', methods=['GET'])
@jwt_required(optional=True)
def get_user():
    return AuthController.get_profile()
