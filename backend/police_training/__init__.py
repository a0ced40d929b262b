# backend/police_training/__init__.py
import logging

from flask import Flask, current_app, request

from .config import Config, engine_options
from .extensions import db, migrate, background

__version__ = "1.0.0"


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", engine_options(app.config))

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    background.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.users import users_bp
    from .routes.tokens import tokens_bp
    from .routes.records import record_blueprints

    app.register_blueprint(system_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(tokens_bp)
    for bp in record_blueprints():
        app.register_blueprint(bp)

    @app.before_request
    def handle_preflight():
        origin = request.headers.get("Origin")
        trusted_origins = current_app.config["CORS_TRUSTED_ORIGINS"]
        if (
            request.method == "OPTIONS"
            and origin in trusted_origins
            and request.headers.get("Access-Control-Request-Method")
        ):
            return "", 200

    @app.after_request
    def add_cors_headers(response):
        trusted_origins = current_app.config["CORS_TRUSTED_ORIGINS"]
        response.headers.add("Vary", "Origin")
        response.headers.add("Vary", "Access-Control-Request-Method")
        origin = request.headers.get("Origin")
        if origin and origin in trusted_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            if request.method == "OPTIONS" and request.headers.get("Access-Control-Request-Method"):
                response.headers["Access-Control-Allow-Methods"] = "OPTIONS, PUT, PATCH, DELETE"
                response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
