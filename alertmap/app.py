import logging
import os

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from alertmap.auth import refresh_expiring_session
from alertmap.cli import create_user_command
from alertmap.config import DEV_SECRET, Config, get_config
from alertmap.errors import register_error_handlers
from alertmap.extensions import cors, db, jwt

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("alertmap").setLevel(level)
    app.logger.setLevel(level)


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration object or dict. Defaults to the
            environment-selected config, which requires DATABASE_URL.
    """
    app = Flask(__name__)

    if config is None:
        config = get_config()
    if isinstance(config, dict):
        app.config.from_object(Config)
        app.config.update(config)
    else:
        app.config.from_object(config)

    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise RuntimeError("DATABASE_URL must be set")
    if app.config.get("JWT_COOKIE_SECURE") and app.config["JWT_SECRET_KEY"] == DEV_SECRET:
        raise RuntimeError("Refusing to start in production with the development secret key")

    configure_logging(app)

    # Init
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )
    register_error_handlers(app)

    # Blueprints
    from alertmap.routes.alert_routes import alerts_bp
    from alertmap.routes.auth_routes import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(alerts_bp, url_prefix='/api')

    app.after_request(refresh_expiring_session)
    app.cli.add_command(create_user_command)

    @app.route('/health')
    def health():
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Health check could not reach the database")
            return jsonify({"status": "unhealthy", "database": "disconnected"}), 503
        return jsonify({"status": "healthy", "database": "connected"}), 200

    # Create Tables
    with app.app_context():
        db.create_all()

    logger.info("AlertMap ready")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=app.config.get("DEBUG", False),
        use_reloader=False,
    )
