from flask import Blueprint
from flask_jwt_extended import jwt_required

from alertmap.controllers.alert_controller import AlertController

alerts_bp = Blueprint('alerts', __name__)

@alerts_bp.route('/alerts', methods=['GET'])
def get_alerts():
    return AlertController.get_active_alerts()

@alerts_bp.route('/alerts/stats', methods=['GET'])
def get_alert_stats():
    return AlertController.get_stats()

@alerts_bp.route('/admin/alerts', methods=['GET'])
@jwt_required()
def get_my_alerts():
    return AlertController.get_my_alerts()

@alerts_bp.route('/alerts', methods=['POST'])
@jwt_required()
def create_alert():
    return AlertController.create_alert()

@alerts_bp.route('/alerts/<int:alert_id>', methods=['PUT'])
@jwt_required()
def update_alert(alert_id):
    return AlertController.update_alert(alert_id)

@alerts_bp.route('/alerts/<int:alert_id>', methods=['DELETE'])
@jwt_required()
def delete_alert(alert_id):
    return AlertController.delete_alert(alert_id)
