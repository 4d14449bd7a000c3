"""Application configuration."""

import os
from datetime import timedelta

DEV_SECRET = "dev-secret-change-in-production"

SEVERITIES = ("low", "medium", "high", "critical")

DEFAULT_CATEGORIES = "road,criminal"
DEFAULT_ICONS = (
    "alert-triangle,construction,user-x,ambulance,car,shield,flame,wrench,"
    "ban,alert-circle,help-circle,info,map-pin,phone,users"
)


def _split(value):
    return [item.strip() for item in value.split(",") if item.strip()]


def database_url():
    """Read DATABASE_URL, failing fast when it is not set."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL must be set. Did you forget to provision a database?")
    # Heroku-style URLs are not accepted by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


class Config:
    """Base configuration."""

    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", DEV_SECRET)
    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie (JWT carried in an HTTP-only cookie)
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_REFRESH_WINDOW = timedelta(days=1)
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = True
    JWT_SESSION_COOKIE = False

    # CORS
    CORS_ORIGINS = _split(os.environ.get(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
    ))

    # Alert allow-lists
    ALERT_CATEGORIES = _split(os.environ.get("ALERT_CATEGORIES", DEFAULT_CATEGORIES))
    ALERT_SEVERITIES = list(SEVERITIES)
    ALERT_ICONS = _split(os.environ.get("ALERT_ICONS", DEFAULT_ICONS))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    JWT_COOKIE_SECURE = True


class TestingConfig(Config):
    """In-memory SQLite, no CSRF double submit."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_COOKIE_CSRF_PROTECT = False
    SECRET_KEY = "testing-secret"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-length"


def get_config():
    """Get configuration based on environment."""
    env = os.environ.get("FLASK_ENV", "development")
    if env == "production":
        config = ProductionConfig()
    elif env == "testing":
        return TestingConfig()
    else:
        config = DevelopmentConfig()
    config.SQLALCHEMY_DATABASE_URI = database_url()
    return config
