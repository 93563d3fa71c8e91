"""
Configuration management for the Foodly client.

This module centralizes environment variable loading from the .env file at project root.
It is imported by every component that needs a setting, so .env is loaded before any
other code reads the environment.

On machines without a .env file, load_dotenv() is a no-op and the process environment
(or the defaults below) is used instead.

Environment Variables:
- FOODLY_API_URL: Optional, backend base URL (defaults to http://localhost:8000)
- FOODLY_REQUEST_TIMEOUT: Optional, per-request timeout in seconds (default: 10)
- FOODLY_TOKEN_PATH: Optional, file holding the persisted bearer token
- FOODLY_STALE_WINDOW_MS: Optional, cache staleness window (default: 300000, 5 minutes)
- FOODLY_BURST_INTERVAL_MS: Optional, minimum spacing between fetch attempts (default: 200)
- FOODLY_PER_PAGE: Optional, page size used for searches (default: 12)
- FOODLY_TAGS_TTL_SECONDS: Optional, tag list cache lifetime (default: 3600)
- LOG_LEVEL: Optional, DEBUG / INFO / WARNING / ERROR (default: INFO)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    The project root is found by going up from this file's location
    (foodly/config.py -> project root). Safe to call multiple times; existing
    environment variables take precedence over values in .env.
    """
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


# Load .env file on module import
load_env_file()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


class ApiConfig:
    """Configuration for the backend connection."""

    @staticmethod
    def get_base_url() -> str:
        """
        Get the backend API base URL.

        Returns:
            Backend URL with trailing slash removed (default: http://localhost:8000)
        """
        return os.getenv("FOODLY_API_URL", "http://localhost:8000").rstrip("/")

    @staticmethod
    def get_timeout() -> float:
        """
        Get the per-request timeout in seconds.

        Every network call carries this deadline, so a hung backend never leaves
        a cache loading forever.
        """
        raw = os.getenv("FOODLY_REQUEST_TIMEOUT", "10")
        try:
            return float(raw)
        except ValueError:
            raise RuntimeError(f"FOODLY_REQUEST_TIMEOUT must be a number, got {raw!r}")


class CacheConfig:
    """Configuration for the recipe caches."""

    @staticmethod
    def get_stale_window_ms() -> int:
        """Maximum age of a cached fetch before it is refetched (default: 5 minutes)."""
        return _get_int("FOODLY_STALE_WINDOW_MS", 5 * 60 * 1000)

    @staticmethod
    def get_burst_interval_ms() -> int:
        """Minimum spacing between two fetch attempts of the same store (default: 200ms)."""
        return _get_int("FOODLY_BURST_INTERVAL_MS", 200)

    @staticmethod
    def get_per_page() -> int:
        """Page size sent with search queries (default: 12)."""
        return _get_int("FOODLY_PER_PAGE", 12)

    @staticmethod
    def get_tags_ttl_seconds() -> int:
        """Lifetime of the cached tag list (default: 1 hour)."""
        return _get_int("FOODLY_TAGS_TTL_SECONDS", 3600)


class StorageConfig:
    """Configuration for the persisted session token."""

    @staticmethod
    def get_token_path() -> Path:
        """
        Get the path of the token file.

        Returns:
            Path from FOODLY_TOKEN_PATH, or ~/.foodly/storage.json
        """
        raw = os.getenv("FOODLY_TOKEN_PATH")
        if raw:
            return Path(raw).expanduser()
        return Path.home() / ".foodly" / "storage.json"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for scripts using the client.

    Args:
        level: Log level name; defaults to LOG_LEVEL env var, then INFO
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
