"""
Centralized configuration for the reconciliation backend.

All environment variables and settings should be defined here
to avoid duplication across modules. Matching thresholds and the unit
mapping live in the engine's JSON config, pointed to by CONFIG_PATH.
"""
import os
from functools import lru_cache
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[2]


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:8090,http://localhost:5173,http://127.0.0.1:8090"
    ).split(",")

    # Learned pattern database
    DB_PATH: str = os.environ.get("RECONCILE_DB_PATH", str(ROOT_DIR / "data" / "reconcile.db"))

    # Engine config (thresholds, unit mapping); empty = packaged reconcile_config.json
    CONFIG_PATH: str = os.environ.get("RECONCILE_CONFIG_PATH", "")

    # API key for protecting the confirm endpoint (optional)
    API_KEY: str = os.environ.get("RECONCILE_API_KEY", "")

    # Root log level for the service
    LOG_LEVEL: str = os.environ.get("RECONCILE_LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
