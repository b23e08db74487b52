"""Configuration utilities for infrastructure layer.

Values come from the environment; a ``.env`` file in the working
directory is loaded first when present (existing variables win).

Example .env:
    DYNPROT_API_URL=http://localhost:3001/api
    DYNPROT_API_TOKEN=eyJhbGciOi...
    ANALYSIS_TIMEOUT_SECONDS=30
    LOG_LEVEL=DEBUG
"""

import os
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_ANALYSIS_TIMEOUT_SECONDS = 30.0
DEFAULT_OPENFOODFACTS_TIMEOUT_SECONDS = 10.0
DEFAULT_RETRY_DELAY_SECONDS = 5


def load_environment(dotenv_path: Optional[str] = None) -> bool:
    """
    Load variables from a .env file.

    Args:
        dotenv_path: Explicit file path (default: search from the working directory)

    Returns:
        True if a file was loaded
    """
    return load_dotenv(dotenv_path, override=False)


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def get_api_url() -> str:
    """
    Get analysis backend API root.

    Returns:
        DYNPROT_API_URL without trailing slash, defaults to the local backend
    """
    return os.getenv("DYNPROT_API_URL", DEFAULT_API_URL).rstrip("/")


def get_api_token() -> Optional[str]:
    """
    Get analysis backend bearer token.

    Returns:
        DYNPROT_API_TOKEN, or None if not set
    """
    return os.getenv("DYNPROT_API_TOKEN") or None


def get_analysis_timeout_seconds() -> float:
    """Timeout of one analysis call (ANALYSIS_TIMEOUT_SECONDS)."""
    return _get_float("ANALYSIS_TIMEOUT_SECONDS", DEFAULT_ANALYSIS_TIMEOUT_SECONDS)


def get_openfoodfacts_timeout_seconds() -> float:
    """Timeout of one product lookup (OPENFOODFACTS_TIMEOUT_SECONDS)."""
    return _get_float("OPENFOODFACTS_TIMEOUT_SECONDS", DEFAULT_OPENFOODFACTS_TIMEOUT_SECONDS)


def get_retry_delay_seconds() -> int:
    """Delay suggested to the user after a failed analysis (RETRY_DELAY_SECONDS)."""
    return int(_get_float("RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY_SECONDS))


def get_log_level() -> str:
    """Log level name (LOG_LEVEL), defaults to INFO."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_format() -> str:
    """Log renderer (LOG_FORMAT): "console" (default) or "json"."""
    return os.getenv("LOG_FORMAT", "console").lower()
