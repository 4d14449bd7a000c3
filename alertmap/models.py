import json
import logging
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from alertmap.extensions import db

logger = logging.getLogger(__name__)


def utcnow():
    """Naive UTC timestamp, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    if value is None:
        return None
    return value.isoformat() + "Z"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)  # salted hash
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    alerts = db.relationship("Alert", back_populates="owner", lazy="dynamic")

    def to_dict(self):
        # Only the public summary ever leaves the server
        return {"id": self.id, "username": self.username}

    def __repr__(self):
        return f"<User {self.username}>"


class Alert(db.Model):
    __tablename__ = "alerts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    severity = db.Column(db.String(20), nullable=False)
    x_position = db.Column(db.Float, nullable=False)  # percent of map width
    y_position = db.Column(db.Float, nullable=False)  # percent of map height
    icon = db.Column(db.String(50))
    alternative_route = db.Column(db.Text)
    alternative_routes = db.Column(db.Text)  # JSON list of drawn polylines
    expiration_minutes = db.Column(db.Integer)
    expires_at = db.Column(db.DateTime, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    owner = db.relationship("User", back_populates="alerts")

    def routes_json(self):
        """Stored route geometry, or None when it no longer parses as a route list."""
        if not self.alternative_routes:
            return None
        from alertmap.schemas import parse_routes
        try:
            parse_routes(json.loads(self.alternative_routes))
        except (ValueError, PydanticValidationError):
            logger.warning("Alert %s has malformed route geometry, serving null", self.id)
            return None
        return self.alternative_routes

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "severity": self.severity,
            "xPosition": self.x_position,
            "yPosition": self.y_position,
            "icon": self.icon,
            "alternativeRoute": self.alternative_route,
            "alternativeRoutes": self.routes_json(),
            "expirationMinutes": self.expiration_minutes,
            "createdBy": self.created_by,
            "createdAt": isoformat(self.created_at),
            "expiresAt": isoformat(self.expires_at),
            "isActive": self.is_active,
        }

    def __repr__(self):
        return f"<Alert {self.id} {self.title!r}>"
