"""
Application factory for the AssetTrack asset and warranty tracker.

Usage::

    from assettrack import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import config_by_name
from .extensions import store


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.
        overrides:   Extra config values applied after the config class
                     (tests pass ``DATA_DIR`` this way).

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(overrides)

    # Keep response keys in the order the data files use.
    app.json.sort_keys = False

    # Safety check: refuse to run production with unsafe settings.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    store.init_app(app)


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports; services can safely import ``store`` from extensions at
    module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main blueprint: health check at the root.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # API: asset, component and settings CRUD.
    from .blueprints.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Dashboard: summary cards, charts, events and exports.
    from .blueprints.dashboard import bp as dashboard_bp

    app.register_blueprint(dashboard_bp, url_prefix="/api/dashboard")


def _register_error_handlers(app: Flask) -> None:
    """Return JSON bodies for HTTP errors instead of HTML pages."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify(error=_describe(error, "Bad request")), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify(error=_describe(error, "Not found")), 404

    @app.errorhandler(500)
    def internal_error(error):  # pylint: disable=unused-argument
        """Handle 500 Internal Server Error."""
        return jsonify(error="Internal server error"), 500


def _describe(error, fallback: str) -> str:
    if isinstance(error, HTTPException) and error.description:
        return error.description
    return fallback


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask data-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """Set the root log level from ``LOG_LEVEL``."""
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Quiet down the request log in development.
    if app.debug:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
