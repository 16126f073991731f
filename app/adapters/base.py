"""
Shared HTTP plumbing for upstream recipe adapters.
Translates httpx failures into UpstreamError and records call metrics.
"""

import logging
import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import UpstreamError
from app.models import NormalizedRecipe
from app.services.metrics import record_upstream_call

logger = logging.getLogger(__name__)


def get_json(
    client: httpx.Client,
    url: str,
    params: dict[str, Any],
    *,
    source: str,
    operation: str,
    label: str,
) -> Any:
    """GET url and return the decoded JSON body. Raises UpstreamError on any failure."""
    start = time.perf_counter()
    try:
        response = client.get(url, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.TimeoutException as e:
        record_upstream_call(source, operation, False, time.perf_counter() - start)
        logger.warning("%s %s timed out: %s", label, operation, e)
        raise UpstreamError(f"{label} request timed out") from e
    except httpx.ConnectError as e:
        record_upstream_call(source, operation, False, time.perf_counter() - start)
        logger.warning("%s connection failed: %s", label, e)
        raise UpstreamError(f"Could not connect to {label}") from e
    except httpx.HTTPStatusError as e:
        record_upstream_call(source, operation, False, time.perf_counter() - start)
        logger.warning("%s HTTP error %s: %s", label, e.response.status_code, e)
        raise UpstreamError(
            f"{label} returned HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        record_upstream_call(source, operation, False, time.perf_counter() - start)
        logger.warning("%s request failed: %s", label, e)
        raise UpstreamError(f"{label} request failed: {e}") from e
    except ValueError as e:
        record_upstream_call(source, operation, False, time.perf_counter() - start)
        logger.warning("%s returned invalid JSON: %s", label, e)
        raise UpstreamError(f"{label} returned an invalid response") from e

    record_upstream_call(source, operation, True, time.perf_counter() - start)
    if not isinstance(data, dict):
        raise UpstreamError(f"{label} returned an unexpected response shape")
    return data


def first_candidate(data: dict[str, Any], key: str) -> Optional[Any]:
    """First element of data[key], or None when the list is missing or empty."""
    items = data.get(key)
    if not items or not isinstance(items, list):
        return None
    return items[0]


def build_recipe(fields: dict[str, Any], label: str) -> NormalizedRecipe:
    """Validate mapped fields into a NormalizedRecipe, or raise UpstreamError."""
    try:
        return NormalizedRecipe(**fields)
    except PydanticValidationError as e:
        logger.warning("%s response could not be normalized: %s", label, e)
        raise UpstreamError(f"{label} returned an incomplete recipe") from e


def optional_int(value: Any, minimum: int) -> Optional[int]:
    """Round a numeric upstream field to int; None when missing, non-numeric or below minimum."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return None
    return number if number >= minimum else None
