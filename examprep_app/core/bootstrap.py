"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask

from .error_handlers import register_error_handlers
from .extensions import db
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure the package logger; ``app.logger`` shares its name."""

    setup_logging(
        app,
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_dir=app.config.get("LOG_DIR"),
        to_file=app.config.get("LOG_TO_FILE", True),
    )
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions and per-app state with the Flask app instance."""

    from ..modules.exam.services.session_registry import ExamSessionRegistry

    db.init_app(app)
    ExamSessionRegistry.init_app(app)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints and the JSON error handlers."""

    register_default_modules(app)
    register_error_handlers(app)


def load_catalog(app: Flask) -> None:
    """Load the question catalog the exam and study modules draw from."""

    from ..modules.catalog.services.catalog_service import CatalogService

    CatalogService.init_app(app)


def initialize_database(app: Flask) -> None:
    """Create database tables for every module model."""

    from ..modules.fsrs import models as fsrs_models  # noqa: F401
    from ..modules.profile import models as profile_models  # noqa: F401

    db.create_all()
    app.logger.info("Database ready at %s", app.config.get("SQLALCHEMY_DATABASE_URI"))
