"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``assettrack/__init__.py`` selects the appropriate
config based on the FLASK_ENV environment variable.

Asset data is kept as flat JSON files in ``DATA_DIR``; there is no
database connection to configure.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# =========================================================================
# Sentinel for detecting unset SECRET_KEY in production.
# =========================================================================
_DEFAULT_SECRET_KEY = "dev-secret-change-me"

_DEFAULT_DATA_DIR = os.path.join(os.getcwd(), "data")


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and paths are loaded from environment variables so they
    never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- Data store --------------------------------------------------------
    # Directory holding Assets.json, SubAssets.json and config.json.
    DATA_DIR: str = os.environ.get("DATA_DIR", _DEFAULT_DATA_DIR)

    # -- Dashboard ---------------------------------------------------------
    EVENTS_PER_PAGE: int = int(os.environ.get("EVENTS_PER_PAGE", "5"))
    CURRENCY_SYMBOL: str = os.environ.get("CURRENCY_SYMBOL", "$")

    # Events-panel range when the request names none: a month count,
    # "past", "all" or "specific:YYYY-MM-DD".
    DEFAULT_EVENTS_RANGE: str = os.environ.get("DEFAULT_EVENTS_RANGE", "12")

    # Upper bound on recurrence steps for a single maintenance schedule.
    MAX_RECURRENCE_ITERATIONS: int = int(
        os.environ.get("MAX_RECURRENCE_ITERATIONS", "182500")
    )

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # =====================================================================
    # Production validation helpers
    # =====================================================================

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that production settings are safe to run with.

        Called by ``create_app()`` when ``config_name == 'production'``.
        Raises ``RuntimeError`` for hard requirements and logs warnings
        for soft requirements.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If a critical value is missing or still set
                          to its insecure default.
        """
        errors: list[str] = []

        # -- SECRET_KEY (hard fail) ----------------------------------------
        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        # -- Dashboard sizing (hard fail) ----------------------------------
        if int(app_config.get("EVENTS_PER_PAGE", 0)) < 1:
            errors.append("EVENTS_PER_PAGE must be a positive integer.")
        if int(app_config.get("MAX_RECURRENCE_ITERATIONS", 0)) < 1:
            errors.append("MAX_RECURRENCE_ITERATIONS must be a positive integer.")

        # -- Raise all hard failures at once -------------------------------
        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        # -- DATA_DIR left at the default (soft warning) -------------------
        if app_config.get("DATA_DIR") == _DEFAULT_DATA_DIR:
            _logger.warning(
                "DATA_DIR is not set; asset data will be stored in %s. "
                "Set DATA_DIR in .env for production.",
                _DEFAULT_DATA_DIR,
            )

        # -- LOG_LEVEL sanity check (soft warning) -------------------------
        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production; "
                "asset names and notes may appear in logs. "
                "Consider INFO or WARNING."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging."""

    DEBUG: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment.

    ``DATA_DIR`` is replaced by the test fixtures with a temporary
    directory, so tests never touch real data files.
    """

    TESTING: bool = True
    DATA_DIR: str = os.environ.get("TEST_DATA_DIR", os.path.join(_DEFAULT_DATA_DIR, "test"))
    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and will refuse to launch if critical values are missing.
    """

    DEBUG: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
