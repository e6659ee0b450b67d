# backend/storefront/__init__.py
from flask import Flask, request

from .config import DEV_SECRET_KEY, INSECURE_KEY_ENVS, Config
from .errors import register_error_handlers
from .extensions import db, jwt, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    _check_signing_key(app)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Path ids share the INTEGER column range
    from .routes import IdConverter
    app.url_map.converters["int"] = IdConverter

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.cart import cart_bp
    from .routes.sales import sales_bp
    from .routes.users import users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(users_bp)

    register_error_handlers(app)

    @app.before_request
    def log_request():
        app.logger.info(
            "%s %s - %s", request.method, request.path, request.headers.get("Origin", "no-origin")
        )

    allowed_origins = set(app.config["CORS_ALLOWED_ORIGINS"])

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, Accept"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    app.logger.info("Storefront API configured (env=%s)", app.config["APP_ENV"])
    return app


def _check_signing_key(app: Flask) -> None:
    """Refuse to start with a missing or publicly known token signing key."""
    if app.config["APP_ENV"] in INSECURE_KEY_ENVS:
        return
    key = app.config.get("JWT_SECRET_KEY")
    if not key or key == DEV_SECRET_KEY:
        raise RuntimeError(
            f"JWT_SECRET must be set to a private value when APP_ENV={app.config['APP_ENV']}"
        )
