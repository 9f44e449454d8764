"""
Participation Service - Flask application
Competition enrollment, payment intake, admin verification and payouts.
"""

import logging
import click
from flask import Flask, jsonify
from flasgger import Swagger
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException
from participation_service.auth import register_jwt_callbacks
from participation_service.config import Config
from participation_service.errors import ApplicationError, StoreUnavailable
from participation_service.extensions import db, jwt
from participation_service.logger import setup_logging
from participation_service import models  # noqa: F401  register models

logger = logging.getLogger(__name__)

SWAGGER_TEMPLATE = {
    "info": {"title": "Participation Service", "version": "0.1.0"},
    "securityDefinitions": {
        "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"}
    },
}


def _engine_options(app):
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("postgresql"):
        # Bound every store call: pool checkout and connection setup both time out
        options.setdefault("pool_pre_ping", True)
        options.setdefault("pool_timeout", app.config["DB_POOL_TIMEOUT"])
        options.setdefault("connect_args", {"connect_timeout": app.config["DB_CONNECT_TIMEOUT"]})
    return options


def register_error_handlers(app):
    @app.errorhandler(ApplicationError)
    def handle_application_error(error):
        if error.status_code >= 500:
            logger.error("%s: %s", error.error_code, error.message)
        else:
            logger.info("%s: %s", error.error_code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(OperationalError)
    def handle_store_error(error):
        db.session.rollback()
        logger.error("Store unavailable: %s", error)
        return handle_application_error(StoreUnavailable())

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            "success": False,
            "error_code": error.name.upper().replace(" ", "_"),
            "message": error.description,
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error: %s", error)
        return jsonify({
            "success": False,
            "error_code": "INTERNAL_ERROR",
            "message": "Internal server error",
        }), 500


def register_commands(app):
    from participation_service.services.config_service import seed_initial_config

    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created")

    @app.cli.command("seed-config")
    @click.option("--sponsor-bonus", default=None, help="Sponsor bonus percentage")
    @click.option("--tds", default=None, help="TDS percentage")
    def seed_config(sponsor_bonus, tds):
        """Write the first sponsor bonus / TDS version if none exists."""
        config = seed_initial_config(
            sponsor_bonus if sponsor_bonus is not None else app.config["INITIAL_SPONSOR_BONUS_PCT"],
            tds if tds is not None else app.config["INITIAL_TDS_PCT"],
        )
        if config is None:
            click.echo("Configuration already present, nothing to do")
        else:
            click.echo(f"Seeded configuration v{config.version}")


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = _engine_options(app)

    setup_logging(app.config["LOG_LEVEL"], app.config.get("LOG_FILE"))

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)
    register_jwt_callbacks(jwt)

    Swagger(app, template=SWAGGER_TEMPLATE)

    # Register Blueprints
    from participation_service.routes import admin_bp, competition_bp, participation_bp
    app.register_blueprint(participation_bp, url_prefix='/api/participations')
    app.register_blueprint(competition_bp, url_prefix='/api/competitions')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    register_error_handlers(app)
    register_commands(app)

    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return {"service": "participation-service", "status": "healthy"}, 200
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return {"service": "participation-service", "status": "unhealthy", "error": str(e)}, 503

    logger.info("participation-service started with %d routes", len(list(app.url_map.iter_rules())))
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5004)
