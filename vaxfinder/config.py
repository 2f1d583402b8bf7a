"""Configuration objects for the Vaxfinder backend."""
from __future__ import annotations

import os
from typing import Any, Dict, Type

DEFAULT_HEALTHPOINT_URL = (
    "https://raw.githubusercontent.com/CovidEngine/vaxxnzlocations/main/"
    "healthpointLocations.json"
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base configuration shared by all environments."""

    HEALTHPOINT_URL: str = os.getenv("HEALTHPOINT_URL", DEFAULT_HEALTHPOINT_URL)
    HEALTHPOINT_TIMEOUT: float = float(os.getenv("HEALTHPOINT_TIMEOUT", "30"))
    HEALTHPOINT_CACHE_FAILURES: bool = _env_flag("HEALTHPOINT_CACHE_FAILURES")
    HEALTHPOINT_PREFETCH: bool = _env_flag("HEALTHPOINT_PREFETCH", "true")
    HEALTHPOINT_BLOCKING_LOAD: bool = _env_flag("HEALTHPOINT_BLOCKING_LOAD")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Expose configuration values for debugging and introspection."""

        return {key: getattr(cls, key) for key in dir(cls) if key.isupper()}


class DevelopmentConfig(Config):
    """Configuration suitable for local development."""

    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Configuration tailored for production deployments."""

    DEBUG = False


class TestingConfig(Config):
    """Configuration used by the test suite; never touches the network on startup."""

    TESTING = True
    HEALTHPOINT_URL = "http://healthpoint.test/locations.json"
    HEALTHPOINT_PREFETCH = False
    HEALTHPOINT_BLOCKING_LOAD = True


CONFIG_MAP: Dict[str, Type[Config]] = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name: str | None) -> Type[Config]:
    """Retrieve the configuration class matching the supplied name."""

    if not name:
        return DevelopmentConfig
    return CONFIG_MAP.get(name.lower(), DevelopmentConfig)
