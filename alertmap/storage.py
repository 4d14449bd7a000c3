"""Persistence for users and alerts.

One storage interface over the relational backend. Ownership is never
checked here; callers compare ``alert.created_by`` with the requester first.
"""
import logging
from collections import Counter
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from alertmap.errors import ConflictError
from alertmap.extensions import db
from alertmap.models import Alert, User, isoformat, utcnow

logger = logging.getLogger(__name__)

ALERT_COLUMNS = (
    "title",
    "description",
    "category",
    "severity",
    "x_position",
    "y_position",
    "icon",
    "alternative_route",
    "alternative_routes",
    "is_active",
)


def expiry_from(minutes, now=None):
    """Absolute expiry for a relative duration; 0 or None never expires."""
    if not minutes:
        return None
    return (now or utcnow()) + timedelta(minutes=minutes)


class DatabaseStorage:
    # --- Credentials ---
    def get_user(self, user_id) -> Optional[User]:
        return db.session.get(User, user_id)

    def get_user_by_username(self, username) -> Optional[User]:
        return User.query.filter_by(username=username).first()

    def create_user(self, username, raw_password) -> User:
        if self.get_user_by_username(username):
            raise ConflictError("Username already exists")

        user = User(username=username, password=generate_password_hash(raw_password))
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            db.session.rollback()
            raise ConflictError("Username already exists")
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def set_password(self, user, raw_password):
        user.password = generate_password_hash(raw_password)
        db.session.commit()

    @staticmethod
    def verify_password_hash(stored_hash, raw_password) -> bool:
        # check_password_hash compares digests with hmac.compare_digest
        return check_password_hash(stored_hash, raw_password)

    def verify_password(self, user, raw_password) -> bool:
        return self.verify_password_hash(user.password, raw_password)

    # --- Alerts ---
    def create_alert(self, data, created_by) -> Alert:
        fields = dict(data)
        minutes = fields.pop("expiration_minutes", None) or None
        now = utcnow()

        alert = Alert(
            **{key: fields[key] for key in ALERT_COLUMNS if key in fields and key != "is_active"},
            expiration_minutes=minutes,
            expires_at=expiry_from(minutes, now),
            is_active=True,
            created_by=created_by,
            created_at=now,
        )
        db.session.add(alert)
        db.session.commit()
        logger.info("Alert %s created by user %s (expires %s)", alert.id, created_by, alert.expires_at or "never")
        return alert

    def _live_query(self, now=None):
        now = now or utcnow()
        return Alert.query.filter(
            Alert.is_active.is_(True),
            or_(Alert.expires_at.is_(None), Alert.expires_at >= now),
        )

    def get_active_alerts(self, now=None) -> List[Alert]:
        return self._live_query(now).order_by(Alert.created_at.desc(), Alert.id.desc()).all()

    def get_alert(self, alert_id) -> Optional[Alert]:
        return db.session.get(Alert, alert_id)

    def update_alert(self, alert_id, fields) -> Optional[Alert]:
        alert = self.get_alert(alert_id)
        if alert is None:
            return None

        for key, value in fields.items():
            if key in ALERT_COLUMNS:
                setattr(alert, key, value)

        if "expiration_minutes" in fields:
            minutes = fields["expiration_minutes"] or None
            alert.expiration_minutes = minutes
            alert.expires_at = expiry_from(minutes)

        db.session.commit()
        return alert

    def delete_alert(self, alert_id) -> bool:
        # Only an active row counts, so repeating the delete reports False
        updated = (
            Alert.query.filter(Alert.id == alert_id, Alert.is_active.is_(True))
            .update({Alert.is_active: False}, synchronize_session="fetch")
        )
        db.session.commit()
        return updated > 0

    def get_alerts_by_user(self, user_id) -> List[Alert]:
        return (
            Alert.query.filter_by(created_by=user_id)
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .all()
        )

    def get_alert_stats(self, severities, now=None):
        alerts = self.get_active_alerts(now)
        by_severity = {severity: 0 for severity in severities}
        by_severity.update(Counter(alert.severity for alert in alerts))
        return {
            "total": len(alerts),
            "bySeverity": by_severity,
            "byCategory": dict(Counter(alert.category for alert in alerts)),
            "lastUpdated": isoformat(alerts[0].created_at) if alerts else None,
        }


# Global Singleton
storage = DatabaseStorage()
