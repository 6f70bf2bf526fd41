# backend/app/__init__.py
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Config, check_required_settings
from .cors import cors_headers
from .date_filters import configure_civil_timezone
from .extensions import db, migrate



def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Missing provider URL or service-role key is fatal at startup
    check_required_settings(app.config)
    configure_civil_timezone(app.config["CIVIL_TIMEZONE"])

    app.url_map.strict_slashes = False

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services.identity_service import init_identity_client
    from .services.audit_service import init_audit_logger
    init_identity_client(app)
    init_audit_logger(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.staff import staff_bp  # Admin gateway: privileged account operations
    from .routes.admin import admin_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(reports_bp)

    @app.before_request
    def answer_preflight():
        # Preflight never needs authorization and succeeds for any path
        if request.method == "OPTIONS":
            return Response("ok", status=200, mimetype="text/plain")
        return None

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(
            cors_headers(request.headers.get("Origin"), app.config.get("ALLOWED_ORIGIN"))
        )
        return response

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(_error):
        return Response("Not Found", status=404, mimetype="text/plain")

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return error
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal Server Error"}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
