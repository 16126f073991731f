"""
Environment configuration for the recipe fetch service.
Values are read at call time so credentials can rotate without a restart.
"""

import os
from typing import Optional

DEFAULT_TIMEOUT = 10.0
DEFAULT_DB_PATH = ":memory:"

_DISABLED_VALUES = ("", "false", "none", "0")


def _get(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def spoonacular_api_key() -> Optional[str]:
    return _get("SPOONACULAR_API_KEY")


def edamam_credentials() -> tuple[Optional[str], Optional[str]]:
    """Return (app_id, app_key). Either may be None."""
    return _get("EDAMAM_APP_ID"), _get("EDAMAM_APP_KEY")


def redis_url() -> Optional[str]:
    """Redis URL, or None when unset or explicitly disabled."""
    url = os.environ.get("REDIS_URL", "")
    if url.strip().lower() in _DISABLED_VALUES:
        return None
    return url.strip()


def recipes_db_path() -> str:
    return _get("RECIPES_DB_PATH") or DEFAULT_DB_PATH


def upstream_timeout() -> float:
    raw = _get("UPSTREAM_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT


def log_level() -> str:
    return (_get("LOG_LEVEL") or "INFO").upper()
