"""Application factory for the Vaxfinder backend."""
from __future__ import annotations

import logging

from flask import Flask, current_app
from flask_cors import CORS

from vaxfinder.config import get_config
from vaxfinder.app.middleware import register_request_logging
from vaxfinder.app.services.healthpoint_client import DirectoryFetcher
from vaxfinder.app.services.location_store import LocationStore

STORE_EXTENSION = "location_store"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)
    config_cls = get_config(config_name or app.config.get("ENV"))
    app.config.from_object(config_cls)

    configure_logging(app)
    register_extensions(app)
    register_blueprints(app)
    register_request_logging(app)

    CORS(app)
    return app


def configure_logging(app: Flask) -> None:
    """Apply the configured log level to the application and package loggers."""

    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)
    logging.getLogger("vaxfinder").setLevel(level)


def register_extensions(app: Flask) -> None:
    """Create the shared Healthpoint location store for this application."""

    fetcher = DirectoryFetcher(
        app.config["HEALTHPOINT_URL"],
        timeout=float(app.config["HEALTHPOINT_TIMEOUT"]),
        cache_failures=bool(app.config["HEALTHPOINT_CACHE_FAILURES"]),
    )
    store = LocationStore(fetcher)
    app.extensions[STORE_EXTENSION] = store

    if app.config.get("HEALTHPOINT_PREFETCH"):
        store.mount()


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""

    from vaxfinder.app.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}


def get_location_store(app: Flask | None = None) -> LocationStore:
    """Return the location store owned by ``app`` (or the current app)."""

    target = app or current_app
    return target.extensions[STORE_EXTENSION]


def shutdown_app(app: Flask) -> None:
    """Tear down the application's location store."""

    store = app.extensions.pop(STORE_EXTENSION, None)
    if store is not None:
        store.close()
