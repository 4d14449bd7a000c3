import logging

from flask import current_app, jsonify, request
from flask_jwt_extended import current_user

from alertmap.errors import AuthorizationError, NotFoundError
from alertmap.schemas import AlertCreate, AlertUpdate, validate
from alertmap.storage import storage

logger = logging.getLogger(__name__)


def _allow_lists():
    return {
        "categories": current_app.config["ALERT_CATEGORIES"],
        "icons": current_app.config["ALERT_ICONS"],
    }


def _owned_alert(alert_id, action):
    """Load an alert the current user may modify, or raise 404/403."""
    alert = storage.get_alert(alert_id)
    if alert is None:
        raise NotFoundError("Alert not found")
    if alert.created_by != current_user.id:
        logger.warning("User %s tried to %s alert %s owned by %s", current_user.id, action, alert_id, alert.created_by)
        raise AuthorizationError(f"You are not allowed to {action} this alert")
    return alert


class AlertController:
    # --- Public feed ---
    @staticmethod
    def get_active_alerts():
        alerts = storage.get_active_alerts()
        return jsonify([a.to_dict() for a in alerts]), 200

    @staticmethod
    def get_stats():
        stats = storage.get_alert_stats(current_app.config["ALERT_SEVERITIES"])
        return jsonify(stats), 200

    # --- Owner management ---
    @staticmethod
    def get_my_alerts():
        alerts = storage.get_alerts_by_user(current_user.id)
        return jsonify([a.to_dict() for a in alerts]), 200

    @staticmethod
    def create_alert():
        data = validate(AlertCreate, request.get_json(silent=True), context=_allow_lists())
        alert = storage.create_alert(data.model_dump(), created_by=current_user.id)
        return jsonify(alert.to_dict()), 201

    @staticmethod
    def update_alert(alert_id):
        _owned_alert(alert_id, "edit")
        data = validate(AlertUpdate, request.get_json(silent=True), context=_allow_lists())

        alert = storage.update_alert(alert_id, data.model_dump(exclude_unset=True))
        if alert is None:
            raise NotFoundError("Alert not found")
        logger.info("Alert %s updated by user %s", alert_id, current_user.id)
        return jsonify(alert.to_dict()), 200

    @staticmethod
    def delete_alert(alert_id):
        _owned_alert(alert_id, "delete")

        deleted = storage.delete_alert(alert_id)
        if deleted:
            logger.info("Alert %s deleted by user %s", alert_id, current_user.id)
            message = "Alert deleted"
        else:
            message = "Alert already deleted"
        return jsonify({"message": message, "deleted": deleted}), 200
